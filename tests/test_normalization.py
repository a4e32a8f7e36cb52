"""
Unit tests for Arabic text normalization.
Run: python -m unittest tests.test_normalization
"""
import unittest

from core.normalization import normalize_arabic
from tests.sample_data import BASMALA, FATIHA, IKHLAS


class TestNormalizeArabic(unittest.TestCase):
    def test_strips_diacritics(self):
        self.assertEqual(normalize_arabic("بِسْمِ"), "بسم")
        self.assertEqual(normalize_arabic("الرَّحِيمِ"), "الرحيم")

    def test_basmala(self):
        # superscript alef in الرَّحْمَٰنِ becomes a full alef
        self.assertEqual(normalize_arabic(BASMALA), "بسم الله الرحمان الرحيم")

    def test_alef_variants(self):
        self.assertEqual(normalize_arabic("أحد إياك آمن ٱلله"), "احد اياك امن الله")

    def test_alef_maksura_to_ya(self):
        self.assertEqual(normalize_arabic("هدى"), "هدي")

    def test_teh_marbuta_to_heh(self):
        self.assertEqual(normalize_arabic("رحمة"), "رحمه")

    def test_tatweel_removed(self):
        self.assertEqual(normalize_arabic("الـلـه"), "الله")

    def test_hamza_seats_removed(self):
        self.assertEqual(normalize_arabic("مؤمن"), "ممن")
        self.assertEqual(normalize_arabic("سئل"), "سل")

    def test_whitespace_collapsed_and_trimmed(self):
        self.assertEqual(normalize_arabic("  بسم \t  الله\n"), "بسم الله")

    def test_lowercase(self):
        self.assertEqual(normalize_arabic("Bismillah"), "bismillah")

    def test_empty_and_none(self):
        self.assertEqual(normalize_arabic(""), "")
        self.assertEqual(normalize_arabic(None), "")
        self.assertEqual(normalize_arabic("   "), "")

    def test_only_diacritics_becomes_empty(self):
        self.assertEqual(normalize_arabic("َّْ"), "")

    def test_idempotent(self):
        for text in FATIHA + IKHLAS + ["رحمة هدى مؤمن الـلـه"]:
            once = normalize_arabic(text)
            self.assertEqual(normalize_arabic(once), once)

    def test_same_verse_different_marks(self):
        plain = "قل هو الله احد"
        self.assertEqual(normalize_arabic(IKHLAS[0]), plain)


if __name__ == "__main__":
    unittest.main()
