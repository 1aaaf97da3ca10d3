import unittest

import numpy as np

from photo_similarity.models.raster_image import RasterImage
from photo_similarity.services.fingerprint_service import DARK_BIT, LIGHT_BIT, FingerprintService
from photo_similarity.services.image_service import ImageService
from tests.image_fixtures import checkerboard, encode, solid


def _rgba(arr):
    alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
    return RasterImage(np.concatenate([arr, alpha], axis=2))


class OtsuThresholdTest(unittest.TestCase):
    def test_empty_grid_gives_zero(self):
        self.assertEqual(FingerprintService.otsu_threshold(np.array([], dtype=np.int64)), 0)

    def test_uniform_grid_gives_zero(self):
        self.assertEqual(FingerprintService.otsu_threshold(np.full(2500, 137)), 0)

    def test_picks_gap_between_clusters(self):
        self.assertEqual(FingerprintService.otsu_threshold(np.array([0, 10, 200, 210])), 10)

    def test_first_maximum_wins_ties(self):
        # every t in [10, 19] splits the two values identically
        grid = np.array([10] * 5 + [20] * 5)
        self.assertEqual(FingerprintService.otsu_threshold(grid), 10)

    def test_two_level_black_white(self):
        grid = np.array([0] * 1250 + [255] * 1250)
        self.assertEqual(FingerprintService.otsu_threshold(grid), 0)

    def test_values_are_masked_to_a_byte(self):
        self.assertEqual(FingerprintService.otsu_threshold(np.array([256, 266, 456, 466])), 10)

    def test_accepts_plain_lists(self):
        self.assertEqual(FingerprintService.otsu_threshold([0, 10, 200, 210]), 10)


class BinarizeTest(unittest.TestCase):
    def test_at_or_below_threshold_is_dark(self):
        mask = FingerprintService.binarize(np.array([5, 10, 11, 200]), 10)
        self.assertEqual(mask.tolist(), [DARK_BIT, DARK_BIT, LIGHT_BIT, LIGHT_BIT])
        self.assertEqual(mask.dtype, np.uint8)

    def test_keeps_length(self):
        self.assertEqual(FingerprintService.binarize(np.arange(2500) % 256, 127).size, 2500)


class FingerprintTest(unittest.TestCase):
    def setUp(self):
        self.service = FingerprintService(ImageService())

    def test_uniform_image_is_single_class(self):
        fp = self.service.fingerprint(_rgba(solid(80, 60, (100, 100, 100))))
        self.assertEqual(fp.threshold, 0)
        self.assertEqual(len(fp), 2500)
        self.assertTrue(np.all(fp.mask == LIGHT_BIT))

    def test_black_image_is_all_dark(self):
        fp = self.service.fingerprint(_rgba(solid(50, 50, (0, 0, 0))))
        self.assertEqual(fp.threshold, 0)
        self.assertTrue(np.all(fp.mask == DARK_BIT))

    def test_checkerboard_splits_in_half(self):
        fp = self.service.fingerprint(_rgba(checkerboard(50, 50)))
        self.assertEqual(fp.threshold, 0)
        self.assertEqual(int(fp.mask.sum()), 1250)
        self.assertEqual(fp.mask[0], DARK_BIT)
        self.assertEqual(fp.mask[1], LIGHT_BIT)
        self.assertEqual(fp.mask[50], LIGHT_BIT)

    def test_fingerprint_is_deterministic(self):
        rng = np.random.default_rng(7)
        data = encode(rng.integers(0, 256, size=(120, 90, 3), dtype=np.uint8))
        first = self.service.fingerprint_bytes(data)
        second = self.service.fingerprint_bytes(data)
        self.assertEqual(first.threshold, second.threshold)
        self.assertTrue(np.array_equal(first.mask, second.mask))
        self.assertEqual(first.hexdigest(), second.hexdigest())

    def test_custom_size(self):
        fp = self.service.fingerprint(_rgba(checkerboard(40, 40)), 16, 8)
        self.assertEqual((fp.width, fp.height, len(fp)), (16, 8, 128))

    def test_preview_pixels(self):
        fp = self.service.fingerprint(_rgba(checkerboard(50, 50)))
        preview = fp.to_pixels()
        self.assertEqual(preview.shape, (50, 50))
        self.assertEqual(preview[0, 0], 0)
        self.assertEqual(preview[0, 1], 255)
        self.assertAlmostEqual(fp.dark_ratio, 0.5)

    def test_fingerprints_compare_by_identity(self):
        first = self.service.fingerprint(_rgba(checkerboard(50, 50)))
        second = self.service.fingerprint(_rgba(checkerboard(50, 50)))
        self.assertFalse(first == second)
        self.assertTrue(first == first)
        self.assertTrue(np.array_equal(first.mask, second.mask))


if __name__ == "__main__":
    unittest.main()
