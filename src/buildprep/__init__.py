"""buildprep - input resolution for container image build pipelines."""

from __future__ import annotations

__version__ = "0.1.0"
