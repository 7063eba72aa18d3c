"""Metric formulas and metric-name bookkeeping.

Counting happens in the language analyzers; this module turns raw counts into
the published metric values. Degenerate inputs (no operands, zero volume)
produce 0.0 rather than NaN or infinity so every emitted value is finite.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable
from dataclasses import replace
from typing import Union

from ..models import ScopeMetrics

Number = Union[int, float]

HALSTEAD_METRICS: tuple[str, ...] = (
    "halstead_n1",
    "halstead_N1",
    "halstead_n2",
    "halstead_N2",
    "halstead_length",
    "halstead_estimated_program_length",
    "halstead_purity_ratio",
    "halstead_vocabulary",
    "halstead_volume",
    "halstead_difficulty",
    "halstead_level",
    "halstead_effort",
    "halstead_time",
    "halstead_bugs",
)

LOC_METRICS: tuple[str, ...] = ("loc_sloc", "loc_ploc", "loc_lloc", "loc_cloc", "loc_blank")

NOM_METRICS: tuple[str, ...] = ("nom_functions", "nom_closures", "nom_total")

MI_METRICS: tuple[str, ...] = ("mi_original", "mi_sei", "mi_visual_studio")

# Only computed for function scopes
FUNCTION_METRICS: tuple[str, ...] = ("fn_args", "closure_args", "nexits", "cognitive")

BASE_METRICS: tuple[str, ...] = (
    FUNCTION_METRICS
    + ("cyclomatic",)
    + HALSTEAD_METRICS
    + LOC_METRICS
    + NOM_METRICS
    + MI_METRICS
)

# Statistics added in extended mode, per base metric, over function scopes
EXTENDED_STATISTICS: dict[str, tuple[str, ...]] = {
    "fn_args": ("sum", "average", "min", "max"),
    "closure_args": ("sum", "average", "min", "max"),
    "nexits": ("sum", "average", "min", "max"),
    "cognitive": ("sum", "average", "min", "max"),
    "cyclomatic": ("sum", "average", "min", "max"),
    "nom_functions": ("min", "max"),
    "nom_closures": ("min", "max"),
}
EXTENDED_BASES: tuple[str, ...] = tuple(EXTENDED_STATISTICS)

# Argument totals over functions and closures, placed after closure_args
NARGS_METRICS: tuple[str, ...] = ("nargs_total", "nargs_average")


def _canonical_order() -> tuple[str, ...]:
    order: list[str] = []
    for name in BASE_METRICS:
        order.append(name)
        order.extend(f"{name}_{stat}" for stat in EXTENDED_STATISTICS.get(name, ()))
        if name == "closure_args":
            order.extend(NARGS_METRICS)
    return tuple(order)


METRIC_ORDER: tuple[str, ...] = _canonical_order()
_METRIC_POSITION = {name: i for i, name in enumerate(METRIC_ORDER)}


def order_metric_names(names: Iterable[str]) -> list[str]:
    """Sort metric names canonically; unknown names follow, alphabetically."""
    unique = set(names)
    known = sorted((n for n in unique if n in _METRIC_POSITION), key=_METRIC_POSITION.__getitem__)
    unknown = sorted(n for n in unique if n not in _METRIC_POSITION)
    return known + unknown


def finite(value: Number) -> Number:
    """Replace NaN and infinities with 0.0."""
    if isinstance(value, float) and not math.isfinite(value):
        return 0.0
    return value


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _xlog2(x: int) -> float:
    return x * math.log2(x) if x > 0 else 0.0


def halstead(operators: Counter, operands: Counter) -> dict[str, Number]:
    """Halstead measures from operator and operand occurrence counts."""
    n1 = len(operators)
    n2 = len(operands)
    big_n1 = sum(operators.values())
    big_n2 = sum(operands.values())

    length = big_n1 + big_n2
    vocabulary = n1 + n2
    estimated_length = _xlog2(n1) + _xlog2(n2)
    volume = length * math.log2(vocabulary) if vocabulary > 0 else 0.0
    difficulty = (n1 / 2) * _ratio(big_n2, n2)
    effort = difficulty * volume

    return {
        "halstead_n1": n1,
        "halstead_N1": big_n1,
        "halstead_n2": n2,
        "halstead_N2": big_n2,
        "halstead_length": length,
        "halstead_estimated_program_length": finite(estimated_length),
        "halstead_purity_ratio": finite(_ratio(estimated_length, length)),
        "halstead_vocabulary": vocabulary,
        "halstead_volume": finite(volume),
        "halstead_difficulty": finite(difficulty),
        "halstead_level": finite(_ratio(1.0, difficulty)),
        "halstead_effort": finite(effort),
        "halstead_time": finite(effort / 18),
        "halstead_bugs": finite(effort ** (2 / 3) / 3000),
    }


def maintainability_index(volume: float, cyclomatic: int, sloc: int, cloc: int) -> dict[str, float]:
    """Maintainability index in its original, SEI and Visual Studio variants.

    A zero volume or size makes the logarithms undefined; those variants
    are reported as 0.0.
    """
    if volume <= 0 or sloc <= 0:
        return {name: 0.0 for name in MI_METRICS}

    original = 171.0 - 5.2 * math.log(volume) - 0.23 * cyclomatic - 16.2 * math.log(sloc)
    sei = (
        171.0
        - 5.2 * math.log2(volume)
        - 0.23 * cyclomatic
        - 16.2 * math.log2(sloc)
        + 50.0 * math.sin(math.sqrt(2.4 * (cloc / sloc)))
    )
    visual_studio = max(0.0, original * 100.0 / 171.0)
    return {
        "mi_original": finite(original),
        "mi_sei": finite(sei),
        "mi_visual_studio": finite(visual_studio),
    }


def extend_metrics(scope: ScopeMetrics) -> ScopeMetrics:
    """Add statistics of function metrics to every scope.

    Statistics cover the function scopes in each subtree, the scope itself
    included. Scopes without any function below them get no extended values.
    ``nargs_total`` adds function and closure arguments; ``nargs_average``
    divides it by the scope's ``nom_total``.
    """
    extended, _ = _extend(scope)
    return extended


def _extend(scope: ScopeMetrics) -> tuple[ScopeMetrics, dict[str, list[Number]]]:
    collected: dict[str, list[Number]] = {name: [] for name in EXTENDED_BASES}
    if scope.kind == "function":
        for name in EXTENDED_BASES:
            if name in scope.metrics:
                collected[name].append(scope.metrics[name])

    children = []
    for child in scope.children:
        new_child, values = _extend(child)
        children.append(new_child)
        for name, child_values in values.items():
            collected[name].extend(child_values)

    metrics = dict(scope.metrics)
    for name, values in collected.items():
        if not values:
            continue
        stats = {
            "sum": sum(values),
            "average": sum(values) / len(values),
            "min": min(values),
            "max": max(values),
        }
        for stat in EXTENDED_STATISTICS[name]:
            metrics[f"{name}_{stat}"] = stats[stat]

    if collected["fn_args"] or collected["closure_args"]:
        nargs_total = sum(collected["fn_args"]) + sum(collected["closure_args"])
        metrics["nargs_total"] = nargs_total
        metrics["nargs_average"] = _ratio(nargs_total, scope.metrics.get("nom_total", 0))

    return replace(scope, metrics=metrics, children=tuple(children)), collected
