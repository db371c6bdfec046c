from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Mapping, Optional, Union

from sqldash.widgets.models import WidgetType


DEFAULT_COLORS = ["#22c55e", "#d946ef", "#3b82f6", "#f59e0b", "#ef4444", "#8b5cf6"]

THEME_INK = {
    # theme -> (text, title, gridlines)
    "light": ("#64748b", "#1e293b", "#e2e8f0"),
    "dark": ("#94a3b8", "#f1f5f9", "#334155"),
}

KIND_OPTIONS: Dict[WidgetType, Dict[str, Any]] = {
    WidgetType.LINE: {"curveType": "function", "pointSize": 5},
    WidgetType.PIE: {"pieHole": 0.4, "pieSliceText": "percentage"},
    WidgetType.AREA: {"areaOpacity": 0.3},
}


def merge_options(base: Mapping[str, Any], override: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Key-by-key merge; nested dicts merge recursively and ``override`` wins ties."""
    out = deepcopy(dict(base))
    for key, value in (override or {}).items():
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = merge_options(out[key], value)
        else:
            out[key] = deepcopy(value)
    return out


def base_chart_options(
    theme: str = "light",
    colors: Optional[List[str]] = None,
    legend_position: str = "bottom",
) -> Dict[str, Any]:
    text, title, grid = THEME_INK.get(theme, THEME_INK["light"])
    return {
        "backgroundColor": "transparent",
        "chartArea": {"width": "85%", "height": "75%"},
        "legend": {"position": legend_position, "textStyle": {"color": text, "fontSize": 12}},
        "titleTextStyle": {"color": title, "fontSize": 14, "bold": True},
        "hAxis": {
            "textStyle": {"color": text},
            "titleTextStyle": {"color": text},
            "gridlines": {"color": grid},
            "format": "MMM d, HH:mm",
        },
        "vAxis": {
            "textStyle": {"color": text},
            "titleTextStyle": {"color": text},
            "gridlines": {"color": grid},
        },
        "colors": list(colors or DEFAULT_COLORS),
        "fontName": "DM Sans",
    }


def resolve_chart_options(
    kind: Union[WidgetType, str],
    overrides: Optional[Mapping[str, Any]] = None,
    base: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Layer base <- caller overrides <- kind extras into one options dict."""
    resolved = merge_options(base if base is not None else base_chart_options(), overrides)
    return merge_options(resolved, KIND_OPTIONS.get(WidgetType(kind), {}))
