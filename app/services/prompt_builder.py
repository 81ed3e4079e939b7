"""Render an ``AnalysisInput`` into the instruction text sent to Gemini."""

from __future__ import annotations

from datetime import date
from textwrap import dedent
from typing import Optional

from app.schemas.analysis import (
    AnalysisInput,
    BenchmarkContext,
    MetricsContext,
    OfferContext,
)

NOT_INFORMED = "not informed"
NO_BENCHMARKS = "No benchmark available"

SYSTEM_INSTRUCTION = (
    "You are an analyst specialized in digital marketing and sales funnels. "
    "Respond ONLY with valid JSON, without any additional text."
)

# Must name exactly the fields of app.schemas.analysis.AnalysisOutput.
OUTPUT_FORMAT = dedent(
    """\
    {
      "summary": "string with 2-3 sentences",
      "validation_status": "validated|not_validated|close_to_validation",
      "validation_explanation": "string explaining the status",
      "bottlenecks": [
        {
          "stage": "traffic|funnel|checkout|offer",
          "metric": "metric name",
          "current_value": number,
          "benchmark_value": number,
          "severity": "high|medium|low",
          "explanation": "detailed explanation"
        }
      ],
      "action_plan": [
        {
          "priority": number from 1 to 5,
          "action": "description of the action",
          "expected_impact": "expected impact",
          "difficulty": "easy|medium|hard"
        }
      ],
      "missing_data": ["data1", "data2"],
      "next_test_recommendations": "text with 3 test recommendations"
    }"""
)

_TASKS = dedent(
    """\
    TASKS:
    1. Summarize the performance in 2-3 sentences (field "summary")
    2. Set the validation status (field "validation_status"):
       - "validated": ROAS > 3.0 AND sales > 10
       - "close_to_validation": ROAS 1.5-3.0 OR sales 5-10
       - "not_validated": ROAS < 1.5 AND sales < 5
    3. Explain the status (field "validation_explanation")
    4. Identify up to 5 bottlenecks by comparing against the benchmarks (field "bottlenecks"):
       - Provide stage, metric, current_value, benchmark_value, severity, explanation
       - Possible stages: traffic, funnel, checkout, offer
       - Severity: high (>30% below ideal), medium (10-30% below), low (<10% below)
    5. Create exactly 5 prioritized actions (field "action_plan"):
       - priority: 1 (most important) to 5
       - action: clear description of the action
       - expected_impact: e.g. "+15% CR", "+$500 revenue"
       - difficulty: easy, medium, hard
    6. List missing data that would improve the analysis (field "missing_data")
    7. Recommend exactly 3 next tests in a single text (field "next_test_recommendations")

    RULES:
    - ALWAYS compare against the benchmarks when they are available
    - Be specific with values (do not say "low", say "15% below ideal")
    - Prioritize actions with the highest impact and lowest difficulty
    - If a benchmark does not exist for a metric, do not force a comparison"""
)


def _money(value: float) -> str:
    return f"${value:.2f}"


def _decimal(value: float) -> str:
    return f"{value:.2f}"


def _percent(value: float) -> str:
    return f"{value:.2f}%"


def _day(value: Optional[date]) -> str:
    return value.isoformat() if value is not None else NOT_INFORMED


def _offer_section(offer: OfferContext) -> str:
    budget = _money(offer.budget) if offer.budget is not None else NOT_INFORMED
    lines = [
        "CAMPAIGN DATA:",
        f"- Name: {offer.name}",
        f"- Niche: {offer.niche}",
        f"- Country: {offer.country}",
        f"- Traffic source: {offer.traffic_source}",
        f"- Funnel: {offer.funnel_type}",
        f"- Budget: {budget}",
        f"- Period: {_day(offer.start_date)} to {_day(offer.end_date)}",
    ]
    return "\n".join(lines)


def _metrics_section(metrics: MetricsContext) -> str:
    lines = [
        "METRICS:",
        f"- Impressions: {metrics.impressions}",
        f"- Clicks: {metrics.clicks}",
        f"- CTR: {_percent(metrics.ctr)}",
        f"- CPC: {_money(metrics.cpc)}",
        f"- CPM: {_money(metrics.cpm)}",
        f"- Leads: {metrics.leads}",
        f"- Sales: {metrics.sales}",
        f"- Conversion rate: {_percent(metrics.conversion_rate)}",
        f"- Revenue: {_money(metrics.revenue)}",
        f"- Cost: {_money(metrics.cost)}",
        f"- ROAS: {_decimal(metrics.roas)}",
        f"- AOV: {_money(metrics.aov)}",
    ]
    return "\n".join(lines)


def _benchmark_line(benchmark: BenchmarkContext) -> str:
    return (
        f"- {benchmark.metric_name.value}: "
        f"Min {_decimal(benchmark.min_value)} | "
        f"Ideal {_decimal(benchmark.ideal_value)} | "
        f"Max {_decimal(benchmark.max_value)}"
    )


def _benchmark_section(benchmarks: tuple[BenchmarkContext, ...]) -> str:
    body = (
        "\n".join(_benchmark_line(benchmark) for benchmark in benchmarks)
        if benchmarks
        else NO_BENCHMARKS
    )
    return f"MARKET BENCHMARKS:\n{body}"


def build_prompt(context: AnalysisInput) -> str:
    """Return the full prompt; identical input always yields identical text."""
    sections = [
        "Analyze this marketing campaign:",
        _offer_section(context.offer),
        _metrics_section(context.metrics),
        _benchmark_section(context.benchmarks),
        _TASKS,
        f"Return JSON EXACTLY in this format:\n{OUTPUT_FORMAT}",
    ]
    return "\n\n".join(sections)


__all__ = [
    "NOT_INFORMED",
    "NO_BENCHMARKS",
    "OUTPUT_FORMAT",
    "SYSTEM_INSTRUCTION",
    "build_prompt",
]
