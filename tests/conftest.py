"""Shared test setup."""

import matplotlib

# Headless rendering for viewer and GUI-mode tests
matplotlib.use("Agg")
