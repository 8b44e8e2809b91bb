"""
AURA Smart White Board
======================

Handwriting-to-answer pipeline for a freehand whiteboard.
Rasterizes the drawing, reads it with two differently tuned OCR passes,
fuses the results and asks a generative model for an answer.

Main components:
- Pixel filters (contrast gain, weighted grayscale, binarization)
- Tesseract adapters bound to a recognition profile
- Dual-pass extraction with rule-based fusion
- Extraction orchestration with low-confidence fallback
- Stroke log, drawing surface and answer service client
"""

__version__ = "1.0.0"
__author__ = "AURA Board Team"
