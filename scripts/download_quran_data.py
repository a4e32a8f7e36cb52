#!/usr/bin/env python3
"""
Download the Quran text from the AlQuran Cloud API and write the corpus file.

Usage:
  python scripts/download_quran_data.py                 # writes data/quran.json
  python scripts/download_quran_data.py -o quran.json

Output: {"ayahs": [{"number", "text", "numberInSurah", "juz", "page", "surah"}, ...]}
"""
import argparse
import json
import logging
import os
import sys

import requests

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.quran_data import QuranCorpus, records_from_payload

QURAN_TEXT_URL = "https://api.alquran.cloud/v1/quran/ar.alafasy"

logger = logging.getLogger("download_quran_data")


def download(url: str = QURAN_TEXT_URL, timeout: float = 120) -> dict:
    response = requests.get(url, headers={"User-Agent": "quran-recitation/1.0"}, timeout=timeout)
    response.raise_for_status()
    return response.json()


def main():
    parser = argparse.ArgumentParser(description="Download Quran text (AlQuran Cloud) into a corpus JSON file")
    parser.add_argument("-o", "--output", default=os.path.join("data", "quran.json"), help="Output path")
    parser.add_argument("--url", default=QURAN_TEXT_URL, help="API endpoint returning data.surahs[].ayahs[]")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    logger.info("Downloading Quran data from %s", args.url)
    try:
        payload = download(args.url)
    except requests.RequestException as e:
        logger.error("Download failed: %s", e)
        return 1
    if not isinstance(payload.get("data"), dict) or not payload["data"].get("surahs"):
        logger.error("Invalid API response structure")
        return 1

    ayahs = records_from_payload(payload)
    # Fails on malformed records before anything is written
    corpus = QuranCorpus.from_records(ayahs)

    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump({"ayahs": ayahs}, f, ensure_ascii=False, indent=2)
    logger.info("Saved %d ayahs to %s", len(corpus), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
