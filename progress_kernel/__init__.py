"""
Progress Kernel - weekly progress and milestone accumulation engine.

Tracks solar-installation projects through weekly status reports with:
- Monotonic milestone inheritance across weeks
- Write-time progress computed from the project type's milestone catalog
- Confirmation-gated project completion
- Atomic deletion of a project and all of its reports
"""

__version__ = "0.1.0"
