from __future__ import annotations
from typing import Dict, Any, List, Optional, Union
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from sqldash.db.models import QueryResult
from sqldash.exceptions.errors import RenderError
from sqldash.logging.logger import get_logger
from sqldash.viz.transform import matrix_for, render_stat_summary
from sqldash.widgets.models import WidgetType

log = get_logger("viz.plotly_factory")

NO_DATA = "No data available"

RECOGNIZED_OPTIONS = {"title", "colors", "legend", "hAxis", "vAxis"}

LEGEND_LAYOUT = {
    "top": dict(orientation="h", x=0.5, xanchor="center", y=1.02, yanchor="bottom"),
    "bottom": dict(orientation="h", x=0.5, xanchor="center", y=-0.2, yanchor="top"),
    "left": dict(orientation="v", x=-0.15, xanchor="right", y=0.5, yanchor="middle"),
    "right": dict(orientation="v", x=1.02, xanchor="left", y=0.5, yanchor="middle"),
}


def _frame(matrix: List[List[Any]]) -> pd.DataFrame:
    header = [h["label"] if isinstance(h, dict) else h for h in matrix[0]]
    return pd.DataFrame(matrix[1:], columns=header)


def _message_figure(text: str, caption: Optional[str] = None, size: int = 14) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(text=text, x=0.5, y=0.5, xref="paper", yref="paper", showarrow=False, font=dict(size=size))
    if caption:
        fig.add_annotation(
            text=caption, x=0.5, y=0.3, xref="paper", yref="paper", showarrow=False, font=dict(size=12)
        )
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return fig


def apply_options(fig: go.Figure, options: Dict[str, Any]) -> go.Figure:
    """Map recognized chart options onto the Plotly layout.

    Anything else is kept untouched under ``layout.meta["options"]``.
    """
    layout: Dict[str, Any] = {}
    if options.get("title"):
        layout["title"] = {"text": str(options["title"])}
    if options.get("colors"):
        layout["colorway"] = list(options["colors"])

    position = (options.get("legend") or {}).get("position")
    if position == "none":
        layout["showlegend"] = False
    elif position in LEGEND_LAYOUT:
        layout["legend"] = LEGEND_LAYOUT[position]

    h_title = (options.get("hAxis") or {}).get("title")
    v_title = (options.get("vAxis") or {}).get("title")
    if h_title:
        layout["xaxis_title"] = str(h_title)
    if v_title:
        layout["yaxis_title"] = str(v_title)

    opaque = {k: v for k, v in options.items() if k not in RECOGNIZED_OPTIONS}
    layout["meta"] = {"options": opaque}
    fig.update_layout(**layout)
    return fig


def build_figure(
    kind: Union[WidgetType, str],
    result: QueryResult,
    options: Optional[Dict[str, Any]] = None,
) -> go.Figure:
    options = options or {}
    try:
        try:
            kind = WidgetType(kind)
        except ValueError:
            raise RenderError(f"Unsupported chart type: {kind}")

        if kind == WidgetType.STAT:
            display = render_stat_summary(result, options)
            return _message_figure(display.value, display.caption, size=40)

        if not result.rows:
            return apply_options(_message_figure(NO_DATA), options)

        df = _frame(matrix_for(kind, result))
        if df.shape[1] == 0:
            raise RenderError(f"{kind.value} requires at least one column.")

        if kind == WidgetType.TABLE:
            fig = go.Figure(
                data=[go.Table(
                    header=dict(values=list(df.columns)),
                    cells=dict(values=[df[c].tolist() for c in df.columns])
                )]
            )
            return apply_options(fig, options)

        domain, series = df.columns[0], list(df.columns[1:])
        if not series:
            raise RenderError(f"{kind.value} requires a label column and at least one value column.")

        if kind in {WidgetType.LINE, WidgetType.AREA}:
            fn = px.line if kind == WidgetType.LINE else px.area
            fig = fn(df, x=domain, y=series)
            if kind == WidgetType.LINE and options.get("curveType") == "function":
                fig.update_traces(line_shape="spline")
            if kind == WidgetType.LINE and options.get("pointSize"):
                fig.update_traces(mode="lines+markers", marker=dict(size=options["pointSize"]))
            return apply_options(fig, options)

        if kind == WidgetType.BAR:
            # Horizontal grouped bars: categories on the vertical axis
            fig = px.bar(df, y=domain, x=series, orientation="h", barmode="group")
            return apply_options(fig, options)

        if kind == WidgetType.PIE:
            fig = px.pie(df, names=domain, values=series[0], hole=float(options.get("pieHole", 0) or 0))
            if options.get("pieSliceText") == "percentage":
                fig.update_traces(textinfo="percent")
            return apply_options(fig, options)

        raise RenderError(f"Unhandled chart type: {kind.value}")
    except Exception:
        log.exception("Plotly render error", extra={"kind": str(getattr(kind, "value", kind))})
        raise
