# advisor/utils/drawing.py
# Overlays y HUD sencillos (colores en BGR)
import cv2

RED=(0,0,255); YELLOW=(0,255,255); GREEN=(0,255,0); CYAN=(255,255,0); WHITE=(255,255,255)
BAND_COLORS = {"red": RED, "yellow": YELLOW, "green": GREEN}


def draw_box(frame, bbox, color=CYAN, text=None):
    x, y, w, h = map(int, bbox)
    cv2.rectangle(frame, (x, y), (x + w, y + h), color, 2)
    if text:
        cv2.putText(frame, text, (x, y - 5 if y > 10 else 10), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1)


def draw_hud(frame, text, x=10, y=20, color=WHITE):
    cv2.putText(frame, text, (x,y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2)


def draw_report(frame, report, show_bands=False):
    """Dibuja cajas, franjas del semáforo (opcional) y el estado del frame."""
    for bbox, label in report.boxes:
        draw_box(frame, bbox, text=label)
    if show_bands:
        for band, color in report.bands:
            draw_box(frame, band, color=BAND_COLORS.get(color, WHITE))

    objs = ", ".join(report.descriptors) if report.descriptors else "-"
    status_color = RED if report.action_text == "STOP" else GREEN
    draw_hud(frame, f"Objects: {objs}", y=20)
    draw_hud(frame, f"Distance: {report.distance_text}", y=45)
    draw_hud(frame, f"Action: {report.action_text}", y=70, color=status_color)
    return frame
