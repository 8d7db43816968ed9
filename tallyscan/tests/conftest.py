"""Shared pytest fixtures/options for tallyscan tests."""

from __future__ import annotations


def pytest_addoption(parser):
    """Custom pytest option for receipt e2e tests."""
    parser.addoption(
        "--tallyscan-e2e-mode",
        action="store",
        default="rules",
        choices=["rules", "hybrid", "both"],
        help=(
            "Receipt E2E mode for tallyscan/tests/test_e2e_receipts.py: "
            "rules (rule-based parser only), hybrid (configured assistants first), or both."
        ),
    )
