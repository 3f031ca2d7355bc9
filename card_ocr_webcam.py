import argparse
import threading

import cv2

from card_scanner.config import ScannerConfig, load_config
from card_scanner.entities import Frame
from card_scanner.exceptions import CameraError, ScannerError
from card_scanner.lane import FrameLane
from card_scanner.logging_config import setup_logging
from card_scanner.overlay import CYAN, GREEN, YELLOW, draw_lines, draw_region
from card_scanner.pipeline import build_recognizer, build_session

WINDOW_NAME = 'Credit Card OCR - Live Scan'


# ============================================================
#  ARGUMENTS
# ============================================================
def build_argparser():
    ap = argparse.ArgumentParser(description="Scan a payment card number from the webcam")
    ap.add_argument('-c', '--config', help="YAML config file")
    ap.add_argument('--camera', type=int, help="camera index (default: try 0 then 1)")
    ap.add_argument('--recognizer', choices=['template', 'tesseract', 'paddle'])
    ap.add_argument('--font', help="OCR-A digit reference image")
    ap.add_argument('-d', '--debug', action='store_true', help="debug logging")
    return ap


def resolve_config(args):
    cfg = load_config(args.config) if args.config else ScannerConfig()
    if args.camera is not None:
        cfg.camera_index = args.camera
    if args.recognizer:
        cfg.recognizer = args.recognizer
    if args.font:
        cfg.font_path = args.font
    if args.debug:
        cfg.log_level = 'DEBUG'
    return cfg


# ============================================================
#  CAMERA
# ============================================================
def open_camera(cfg):
    indexes = [cfg.camera_index] if cfg.camera_index is not None else [0, 1]
    for camera_index in indexes:
        cap = cv2.VideoCapture(camera_index)
        if cap.isOpened():
            print(f"[SUCCESS] Camera {camera_index} opened!")
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.frame_width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.frame_height)
            cap.set(cv2.CAP_PROP_AUTOFOCUS, 1)
            return cap
        cap.release()
    raise CameraError(f"Could not open webcam (tried {indexes})")


# ============================================================
#  LIVE SCAN
# ============================================================
class ScanDisplay:
    """Latest region/result handed over from the frame lane to the UI loop."""

    def __init__(self):
        self._lock = threading.Lock()
        self.region = None
        self.number = None

    def on_region_update(self, region):
        with self._lock:
            self.region = region

    def on_result(self, number):
        with self._lock:
            self.number = number

    def snapshot(self):
        with self._lock:
            return self.region, self.number


def run_webcam_scan(cfg):
    print("\n" + "=" * 60)
    print("CREDIT CARD OCR - LIVE SCAN")
    print("=" * 60)
    print(f"Recognizer: {cfg.recognizer}")

    recognizer = build_recognizer(cfg)
    display = ScanDisplay()
    session = build_session(cfg, recognizer, on_region_update=display.on_region_update)
    lane = FrameLane(session.submit_frame)

    cap = open_camera(cfg)

    print("\nInstructions:")
    print("- Hold the card flat in front of the camera")
    print("- Ensure good, even lighting")
    print("- Press 'q' to QUIT")
    print("=" * 60 + "\n")

    session.start(display.on_result)
    lane.start()
    number = None
    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                print("[ERROR] Failed to grab frame")
                break

            lane.submit(Frame.from_image(frame))
            region, number = display.snapshot()

            display_frame = frame.copy()
            if region is not None:
                draw_region(display_frame, region, YELLOW if number else GREEN)
            if number:
                draw_lines(display_frame, [f"Number: {number}", "Press any key to close"],
                           color=YELLOW, scale=0.8, spacing=40)
            else:
                status = "CARD FOUND - READING" if region is not None else "PLACE CARD IN VIEW"
                draw_lines(display_frame, [status, "Press 'q' to QUIT"], color=CYAN)

            cv2.imshow(WINDOW_NAME, display_frame)

            if number:
                cv2.waitKey(0)
                break
            if cv2.waitKey(1) & 0xFF == ord('q'):
                print("\nExiting without a result...")
                break
    finally:
        session.cancel()
        lane.stop()
        cap.release()
        cv2.destroyAllWindows()

    print("\n" + "=" * 60)
    print(f"Card Number : {number if number else 'NOT DETECTED'}")
    print("=" * 60)
    print("Webcam closed.")
    return number


def main(argv=None):
    args = build_argparser().parse_args(argv)
    try:
        cfg = resolve_config(args)
        setup_logging(cfg.log_level)
        run_webcam_scan(cfg)
    except ScannerError as e:
        print(f"[ERROR] {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
