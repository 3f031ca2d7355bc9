"""Drawing helpers for the live preview."""
import cv2

from .entities import NormalizedRegion

GREEN = (0, 255, 0)
YELLOW = (0, 255, 255)
CYAN = (255, 255, 0)


def draw_region(image, region: NormalizedRegion, color=GREEN, thickness=3, marker_size=20):
    """Draw the card outline with corner markers, in place."""
    h, w = image.shape[:2]
    x1, y1, x2, y2 = region.to_pixels(w, h)
    cv2.rectangle(image, (x1, y1), (x2, y2), color, thickness)

    for (cx, cy, dx, dy) in ((x1, y1, 1, 1), (x2, y1, -1, 1), (x1, y2, 1, -1), (x2, y2, -1, -1)):
        cv2.line(image, (cx, cy), (cx + dx * marker_size, cy), color, thickness)
        cv2.line(image, (cx, cy), (cx, cy + dy * marker_size), color, thickness)
    return image


def draw_lines(image, lines, origin=(10, 40), color=GREEN, scale=0.7, spacing=35):
    x, y = origin
    for line in lines:
        cv2.putText(image, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, scale, color, 2)
        y += spacing
    return image
