#!/usr/bin/env python3
"""
Photo Similarity API Server
Fingerprint a single upload or compare two uploads over HTTP.
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

from .errors import DecodeError, LengthMismatchError
from .services.comparison_service import ComparisonService
from .services.fingerprint_service import FingerprintService
from .services.image_service import ImageService

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,gif,bmp,webp,tif,tiff").split(","))
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024

app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

# Initialize services
image_service = ImageService()
fingerprint_service = FingerprintService(image_service)
comparison_service = ComparisonService(fingerprint_service)

logger = logging.getLogger(__name__)


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def read_upload(field: str):
    """
    Return (filename, bytes) for a multipart field, or (None, error_message).
    """
    if field not in request.files:
        return None, f"No '{field}' image provided"

    file = request.files[field]
    if file.filename == '':
        return None, f"No file selected for '{field}'"
    if not allowed_file(file.filename):
        return None, f"File type not allowed: {file.filename}"

    return secure_filename(file.filename), file.read()


@app.route('/api/fingerprint', methods=['POST'])
def fingerprint_image():
    """Fingerprint one uploaded image."""
    filename, data = read_upload('image')
    if filename is None:
        return jsonify({'success': False, 'message': data}), 400

    try:
        fingerprint = fingerprint_service.fingerprint_bytes(data)
    except DecodeError as e:
        logger.warning(f"Fingerprint decode error for {filename}: {e}")
        return jsonify({'success': False, 'message': f'Could not decode {filename}'}), 400
    except Exception as e:
        logger.error(f"Fingerprint error: {e}")
        return jsonify({'success': False, 'message': 'Error processing image'}), 500

    return jsonify({
        'success': True,
        'filename': filename,
        'threshold': fingerprint.threshold,
        'width': fingerprint.width,
        'height': fingerprint.height,
        'dark_ratio': fingerprint.dark_ratio,
        'fingerprint': fingerprint.hexdigest(),
    })


@app.route('/api/compare', methods=['POST'])
def compare_images():
    """Compare two uploaded images."""
    source_name, source_data = read_upload('source')
    if source_name is None:
        return jsonify({'success': False, 'message': source_data}), 400
    target_name, target_data = read_upload('target')
    if target_name is None:
        return jsonify({'success': False, 'message': target_data}), 400

    try:
        fp_source = fingerprint_service.fingerprint_bytes(source_data)
        fp_target = fingerprint_service.fingerprint_bytes(target_data)
        ratio = comparison_service.compare_fingerprints(fp_source, fp_target)
    except DecodeError as e:
        logger.warning(f"Compare decode error ({source_name} vs {target_name}): {e}")
        return jsonify({'success': False, 'message': f'Could not decode {source_name} or {target_name}'}), 400
    except LengthMismatchError as e:
        logger.error(f"Compare length mismatch: {e}")
        return jsonify({'success': False, 'message': str(e)}), 500
    except Exception as e:
        logger.error(f"Compare error: {e}")
        return jsonify({'success': False, 'message': 'Error comparing images'}), 500

    logger.info(f"{source_name} vs {target_name}: {ratio * 100:.2f}%")

    return jsonify({
        'success': True,
        'source': source_name,
        'target': target_name,
        'ratio': ratio,
        'percentage': ratio * 100,
        'source_threshold': fp_source.threshold,
        'target_threshold': fp_target.threshold,
    })


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'message': 'Photo Similarity API is running',
        'fingerprint_size': image_service.FINGERPRINT_SIZE,
    })


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    return jsonify({'error': f'File too large. Maximum size is {MAX_CONTENT_LENGTH // (1024 * 1024)}MB.'}), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


def main():
    port = int(os.getenv("API_SERVER_PORT", "5002"))
    print("Starting Photo Similarity API Server...")
    print(f"Max upload size: {MAX_CONTENT_LENGTH // (1024 * 1024)}MB")
    print("Endpoints:")
    print("   POST /api/fingerprint")
    print("   POST /api/compare")
    print("   GET  /api/health")
    app.run(host='0.0.0.0', port=port)


if __name__ == '__main__':
    main()
