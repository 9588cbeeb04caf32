"""Booth capture flow: camera access and the capture state machine."""

from .camera import CameraSource, CameraStream, OpenCVCamera
from .capture_machine import CaptureSession, CaptureState

__all__ = ["CameraSource", "CameraStream", "CaptureSession", "CaptureState", "OpenCVCamera"]
