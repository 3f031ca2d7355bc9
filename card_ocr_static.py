import argparse

import cv2

from card_scanner.config import ScannerConfig, load_config
from card_scanner.entities import Frame
from card_scanner.exceptions import ScannerError
from card_scanner.logging_config import setup_logging
from card_scanner.overlay import draw_region
from card_scanner.pipeline import build_detector, build_recognizer, scan_image


# ============================================================
#  ARGUMENTS
# ============================================================
def build_argparser():
    ap = argparse.ArgumentParser(description="Read a card number from a still image")
    ap.add_argument('-i', '--image', required=True, help="Path to input image")
    ap.add_argument('-c', '--config', help="YAML config file")
    ap.add_argument('--recognizer', choices=['template', 'tesseract', 'paddle'])
    ap.add_argument('--font', help="OCR-A digit reference image")
    ap.add_argument('--show', action='store_true', help="show the region that was read")
    ap.add_argument('-d', '--debug', action='store_true', help="debug logging")
    return ap


def run_static_scan(image_path, cfg, show=False):
    img = cv2.imread(image_path)
    if img is None:
        raise ScannerError(f"Could not load {image_path}")
    print(f"\n[SUCCESS] Loaded {image_path} ({img.shape[1]}x{img.shape[0]})")

    frame = Frame.from_image(img)
    number, region = scan_image(frame, build_detector(cfg), build_recognizer(cfg),
                                cfg.max_candidates)

    print("\n" + "=" * 60)
    print("FINAL RESULTS")
    print("=" * 60)
    print(f"Card Number: {number if number else 'NOT DETECTED'}")
    print("=" * 60)

    if show:
        cv2.imshow('Card Region', draw_region(img.copy(), region))
        cv2.waitKey(0)
        cv2.destroyAllWindows()
    return number


def main(argv=None):
    args = build_argparser().parse_args(argv)
    try:
        cfg = load_config(args.config) if args.config else ScannerConfig()
        if args.recognizer:
            cfg.recognizer = args.recognizer
        if args.font:
            cfg.font_path = args.font
        setup_logging('DEBUG' if args.debug else cfg.log_level)
        number = run_static_scan(args.image, cfg, args.show)
    except ScannerError as e:
        print(f"[ERROR] {e}")
        return 1
    return 0 if number else 2


if __name__ == "__main__":
    raise SystemExit(main())
