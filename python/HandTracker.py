import logging
import os
import time
from pathlib import Path
from typing import List, Optional

import mediapipe as mp
import numpy as np

from HandData import HandData

logger = logging.getLogger(__name__)

MODEL_ENV_VAR = "SIGN_POSE_HAND_TASK_PATH"
MODEL_FILENAME = "hand_landmarker.task"


def resolve_model_path(model_path: Optional[str] = None) -> Path:
    """
    Find hand_landmarker.task.
    Priority:
      1) explicit model_path
      2) env SIGN_POSE_HAND_TASK_PATH
      3) repo root, next to this file, current directory
    """
    if model_path:
        p = Path(model_path).expanduser().resolve()
        if not p.exists():
            raise FileNotFoundError(f"hand landmarker model not found: {p}")
        return p

    envp = os.getenv(MODEL_ENV_VAR, "").strip()
    if envp:
        p = Path(envp).expanduser().resolve()
        if not p.exists():
            raise FileNotFoundError(f"{MODEL_ENV_VAR} points to a missing file: {p}")
        return p

    here = Path(__file__).resolve()
    candidates = [
        here.parents[1] / MODEL_FILENAME,
        here.parent / MODEL_FILENAME,
        Path.cwd() / MODEL_FILENAME,
    ]
    for c in candidates:
        if c.exists():
            return c.resolve()

    raise FileNotFoundError(
        f"{MODEL_FILENAME} not found. Put it in the repository root or set {MODEL_ENV_VAR}."
    )


class HandTracker:
    """
    MediaPipe Tasks HandLandmarker in VIDEO mode. Turns each frame into a list
    of HandData with image landmarks, world landmarks and handedness.
    """

    def __init__(self, cfg, model_path: Optional[str] = None):
        self.cfg = cfg
        tcfg = cfg.get("tracker", {})
        self.model_path = resolve_model_path(model_path or tcfg.get("model_path"))

        BaseOptions = mp.tasks.BaseOptions
        HandLandmarker = mp.tasks.vision.HandLandmarker
        HandLandmarkerOptions = mp.tasks.vision.HandLandmarkerOptions
        RunningMode = mp.tasks.vision.RunningMode

        options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=str(self.model_path)),
            running_mode=RunningMode.VIDEO,
            num_hands=int(tcfg.get("num_hands", 1)),
            min_hand_detection_confidence=tcfg.get("min_detection_confidence", 0.5),
            min_hand_presence_confidence=tcfg.get("min_presence_confidence", 0.5),
            min_tracking_confidence=tcfg.get("min_tracking_confidence", 0.5),
        )
        self._landmarker = HandLandmarker.create_from_options(options)
        self._last_ts_ms = 0
        logger.info("hand landmarker loaded from %s", self.model_path)

    def close(self) -> None:
        self._landmarker.close()

    def _ensure_ts(self, ts_ms: int) -> int:
        # VIDEO mode needs strictly increasing timestamps
        if ts_ms <= self._last_ts_ms:
            ts_ms = self._last_ts_ms + 1
        self._last_ts_ms = ts_ms
        return ts_ms

    def process_frame(self, frame_rgb: np.ndarray, timestamp: Optional[float] = None) -> List[HandData]:
        """
        frame_rgb: (H, W, 3) uint8 RGB image.
        timestamp: absolute time (seconds) for this frame.
        Returns list of HandData in the order the landmarker reports them.
        """
        if frame_rgb is None or frame_rgb.ndim != 3 or frame_rgb.shape[2] != 3:
            return []
        if timestamp is None:
            timestamp = time.time()

        ts_ms = self._ensure_ts(int(time.monotonic() * 1000))
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(frame_rgb))
        result = self._landmarker.detect_for_video(mp_image, ts_ms)

        hands = []
        if not result.hand_landmarks:
            return hands

        for idx, lm in enumerate(result.hand_landmarks):
            h = HandData()
            h.raw_landmarks = lm
            h.landmarks = lm
            if result.hand_world_landmarks and idx < len(result.hand_world_landmarks):
                h.world_landmarks = result.hand_world_landmarks[idx]
            if result.handedness and idx < len(result.handedness) and result.handedness[idx]:
                category = result.handedness[idx][0]
                h.handedness = category.category_name
                h.handedness_score = float(category.score)
            h.visible = True
            h.timestamp = timestamp
            hands.append(h)

        return hands
