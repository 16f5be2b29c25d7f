"""
SLBL failure-surface and displacement modelling along a 2D topographic section.

This package provides:
- SLBL (Sloping Local Base Level) failure-surface generation (exact and iterative)
- 2D/3D displacement vector geometry and line-of-sight projection
- Unit and combined displacement profiles ("pillar" projection onto the ground)
- Calibration of profile weights against observed LOS displacement
"""
