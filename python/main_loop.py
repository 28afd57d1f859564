import logging
import threading
import time
from collections import deque
from queue import Empty, Full, Queue

import cv2

from GestureClassifier import GestureClassifier
from HandTracker import HandTracker
from PoseLibrary import get_pose
from helpers import ConfigWatcher, load_config, merge_config

logger = logging.getLogger(__name__)

# --------------------------------------------------------
# Queue for latest frame only (overwrite when full)
# --------------------------------------------------------
FRAME_QUEUE_MAX = 1
DEBUG_WINDOW = "Sign Pose"

# hand skeleton edges for the overlay
HAND_CONNECTIONS = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (0, 17), (17, 18), (18, 19), (19, 20),
)


def draw_overlay(frame, result, hands, fps=None):
    """Skeleton for the first hand plus label, confidence and finger states."""
    h, w, _ = frame.shape
    if hands and hands[0].landmarks is not None:
        pts = [(int(p.x * w), int(p.y * h)) for p in hands[0].landmarks]
        for a, b in HAND_CONNECTIONS:
            cv2.line(frame, pts[a], pts[b], (255, 255, 255), 2)
        for p in pts:
            cv2.circle(frame, p, 3, (0, 200, 255), -1)

    label = result.label or "-"
    cv2.putText(frame, f"{label}  {result.confidence:.2f}", (10, 40), cv2.FONT_HERSHEY_SIMPLEX, 1.2, (0, 255, 0), 2, cv2.LINE_AA)

    pose = get_pose(result.label)
    if pose is not None and pose.instruction:
        cv2.putText(frame, pose.instruction, (10, 70), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (200, 200, 200), 1, cv2.LINE_AA)

    for i, line in enumerate(result.finger_states):
        cv2.putText(frame, line, (10, 100 + i * 22), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (0, 255, 255), 1, cv2.LINE_AA)

    if fps is not None:
        cv2.putText(frame, f"FPS: {fps:.1f}", (10, h - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 0), 2)


# --------------------------------------------------------
# CAPTURE THREAD
# --------------------------------------------------------
def capture_thread(frame_queue, stop_event, cfg, camera=0, model_path=None):
    cap = cv2.VideoCapture(camera)
    if not cap.isOpened():
        logger.error("cannot open camera %s", camera)
        stop_event.set()
        return

    tracker = None
    try:
        tracker = HandTracker(cfg, model_path=model_path)

        fps_times = deque(maxlen=cfg.get("debug", {}).get("fps_window", 20))
        current_fps = 0.0

        logger.info("capture thread started")

        while not stop_event.is_set():
            ok, frame = cap.read()
            if not ok:
                time.sleep(0.01)
                continue

            now = time.time()
            fps_times.append(now)
            if len(fps_times) > 1:
                current_fps = (len(fps_times) - 1) / max(fps_times[-1] - fps_times[0], 1e-6)

            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            hands = tracker.process_frame(rgb, now)

            # keep only the newest sample
            if frame_queue.full():
                try:
                    frame_queue.get_nowait()
                except Empty:
                    pass
            try:
                frame_queue.put_nowait((frame, hands, now, current_fps))
            except Full:
                pass
    except FileNotFoundError as e:
        logger.error("%s", e)
    finally:
        # also stops the classifier thread
        if tracker is not None:
            tracker.close()
        cap.release()
        stop_event.set()
        logger.info("capture thread exiting")


# --------------------------------------------------------
# CLASSIFIER THREAD
# --------------------------------------------------------
def classifier_thread(frame_queue, stop_event, cfg, config_path="config.json", headless=False):
    cfg_watcher = ConfigWatcher(config_path)
    current_cfg = merge_config(cfg, cfg_watcher.get_config())
    classifier = GestureClassifier(current_cfg)

    if not headless:
        cv2.namedWindow(DEBUG_WINDOW, cv2.WINDOW_NORMAL)

    logger.info("classifier thread started")
    last_label = None

    while not stop_event.is_set():
        try:
            frame, hands, timestamp, fps = frame_queue.get(timeout=0.1)
        except Empty:
            continue

        new_cfg = cfg_watcher.check_reload()
        if new_cfg and new_cfg != current_cfg:
            current_cfg = new_cfg
            classifier.update_config(current_cfg)

        result = classifier.classify_hands(hands)
        logger.debug("frame %.3f: %s", timestamp, result)

        if headless:
            if result.label != last_label:
                logger.info("sign: %s", result.to_dict())
            last_label = result.label
            continue

        draw_overlay(frame, result, hands, fps if current_cfg.get("debug", {}).get("show_fps", True) else None)
        cv2.imshow(DEBUG_WINDOW, frame)
        if cv2.waitKey(1) & 0xFF == 27:
            stop_event.set()
            break

    if not headless:
        cv2.destroyAllWindows()
    logger.info("classifier thread exiting")


# --------------------------------------------------------
# MAIN ENTRY
# --------------------------------------------------------
def main(config_path="config.json", camera=0, model_path=None, headless=False):
    cfg = load_config(config_path)

    frame_queue = Queue(maxsize=FRAME_QUEUE_MAX)
    stop_event = threading.Event()

    cap_thread = threading.Thread(
        target=capture_thread, args=(frame_queue, stop_event, cfg, camera, model_path), daemon=True
    )
    class_thread = threading.Thread(
        target=classifier_thread, args=(frame_queue, stop_event, cfg, config_path, headless), daemon=True
    )

    cap_thread.start()
    class_thread.start()

    # Keep main thread alive
    try:
        while not stop_event.is_set():
            time.sleep(0.1)
    except KeyboardInterrupt:
        stop_event.set()

    cap_thread.join(timeout=1.0)
    class_thread.join(timeout=1.0)

    logger.info("shutdown complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    main()
