"""Session continuity: freshness filtering, document excerpts, restoration."""

from continuum.continuity.selector import ContinuitySelector, RestorationPayload, render_report

__all__ = ["ContinuitySelector", "RestorationPayload", "render_report"]
