"""Pytest configuration shared across the suite."""

import copy

import pytest

_VALID_ANALYSIS = {
    "summary": "Strong click-through rate but conversion lags behind the niche ideal.",
    "validation_status": "validated",
    "validation_explanation": "ROAS of 3.50 and 12 sales clear the validation bar.",
    "bottlenecks": [
        {
            "stage": "funnel",
            "metric": "conversion_rate",
            "current_value": 1.2,
            "benchmark_value": 3,
            "severity": "high",
            "explanation": "Conversion rate is 60% below the benchmark ideal.",
        }
    ],
    "action_plan": [
        {
            "priority": 1,
            "action": "Shorten the checkout to a single page.",
            "expected_impact": "+15% CR",
            "difficulty": "medium",
        },
        {
            "priority": 2,
            "action": "Test a free-shipping threshold above the current AOV.",
            "expected_impact": "+$500 revenue",
            "difficulty": "easy",
        },
    ],
    "missing_data": ["landing page load time", "device split"],
    "next_test_recommendations": "1) One-step checkout 2) UGC creatives 3) Shipping threshold.",
}


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def valid_analysis() -> dict:
    """A reply document that satisfies the analysis output contract."""
    return copy.deepcopy(_VALID_ANALYSIS)


@pytest.fixture(autouse=True)
def _isolate_environ():
    """Restore os.environ after each test so .env loading cannot leak between tests."""
    import os

    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)
