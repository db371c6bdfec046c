from __future__ import annotations
import sys
from pathlib import Path as _Path

_ROOT = _Path(__file__).resolve().parents[1]
_SRC = _ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import asyncio
import traceback
import streamlit as st

from sqldash.config.settings import load_settings
from sqldash.db import engine
from sqldash.db.models import ConnectionType
from sqldash.exceptions.errors import DashboardError
from sqldash.logging.logger import init_logging
from sqldash.store.records import ConnectionRepository, DashboardRepository, WidgetRepository
from sqldash.viz.options import base_chart_options, resolve_chart_options
from sqldash.viz.plotly_factory import build_figure
from sqldash.viz.transform import render_stat_summary
from sqldash.widgets.models import Widget, WidgetType
from sqldash.widgets.runner import WidgetRun, preview_query, run_dashboard

st.set_page_config(page_title="SQL Dashboards", layout="wide")

@st.cache_resource
def bootstrap():
    settings = load_settings()
    init_logging(settings.log_level, settings.log_file)
    connections = ConnectionRepository(settings.data_dir)
    dashboards = DashboardRepository(settings.data_dir)
    widgets = WidgetRepository(settings.data_dir)
    return settings, connections, dashboards, widgets

try:
    settings, connections, dashboards, widgets = bootstrap()
except Exception:
    st.error("Startup failed. See error below.")
    st.code(traceback.format_exc())
    raise

base_options = base_chart_options(
    theme=settings.chart_theme,
    colors=settings.chart_colors,
    legend_position=settings.chart_legend_position,
)
stat_options = {
    "thousandsSeparator": settings.stat_thousands_separator,
    "decimalSeparator": settings.stat_decimal_separator,
}


def _render(widget: Widget, run: WidgetRun) -> None:
    st.markdown(f"**{widget.title}**")
    if not run.ok:
        st.error(run.message)
        if st.button("Retry", key=f"retry_{widget.id}"):
            retry = asyncio.run(run_dashboard([widget], connections))[0]
            st.session_state["runs"][widget.id] = retry
            st.rerun()
        return

    if widget.type == WidgetType.STAT:
        display = render_stat_summary(run.result, {**stat_options, **widget.chart_options})
        st.metric(label=display.caption or widget.title, value=display.value)
        return

    options = resolve_chart_options(widget.type, widget.chart_options, base=base_options)
    try:
        st.plotly_chart(build_figure(widget.type, run.result, options), use_container_width=True)
    except DashboardError as e:
        st.warning(f"Chart render failed: {e}")


with st.sidebar:
    st.header("Connections")
    for c in connections.list():
        masked = c.masked()
        with st.expander(f"{masked['name']} ({masked['type']})"):
            st.json(masked)
            b1, b2 = st.columns(2)
            if b1.button("Test", key=f"test_{c.id}"):
                probe = asyncio.run(engine.test_connection(c, timeout_ms=settings.probe_timeout_ms))
                if probe.success:
                    st.success("Connection OK")
                else:
                    st.error(probe.error)
            if b2.button("Delete", key=f"del_{c.id}"):
                connections.delete(c.id)
                st.rerun()

    with st.form("new_connection", clear_on_submit=True):
        st.subheader("New connection")
        name = st.text_input("Name")
        kind = st.selectbox("Type", [t.value for t in ConnectionType])
        host = st.text_input("Host (network engines)", value="localhost")
        port = st.number_input("Port (0 = default)", min_value=0, max_value=65535, value=0)
        database = st.text_input("Database (file path for SQLite)")
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        ssl = st.checkbox("SSL")
        if st.form_submit_button("Save"):
            try:
                connections.create(
                    name, kind, host=host, port=int(port), database=database,
                    username=username, password=password, ssl=ssl,
                )
                st.rerun()
            except DashboardError as e:
                st.error(str(e))


st.title("SQL Dashboards")

all_dashboards = dashboards.list()
with st.expander("New dashboard", expanded=not all_dashboards):
    d_name = st.text_input("Dashboard name", key="dash_name")
    d_desc = st.text_input("Description", key="dash_desc")
    if st.button("Create dashboard"):
        try:
            dashboards.create(d_name, d_desc)
            st.rerun()
        except DashboardError as e:
            st.error(str(e))

if not all_dashboards:
    st.caption("No dashboards yet.")
    st.stop()

labels = {f"{d.name}": d for d in all_dashboards}
current = labels[st.selectbox("Dashboard", list(labels.keys()))]
if current.description:
    st.caption(current.description)

with st.expander("Add widget"):
    conn_options = {"(none: synthetic preview)": None}
    conn_options.update({c.name: c.id for c in connections.list()})
    w_title = st.text_input("Title", key="w_title")
    w_type = st.selectbox("Chart", [t.value for t in WidgetType], key="w_type")
    w_conn = st.selectbox("Connection", list(conn_options.keys()), key="w_conn")
    w_query = st.text_area("SQL", key="w_query")
    w_caption = st.text_input("Chart title (optional)", key="w_caption")
    c1, c2 = st.columns(2)
    if c1.button("Preview"):
        draft = Widget(
            dashboard_id=current.id, title=w_title or "Preview", type=WidgetType(w_type),
            connection_id=conn_options[w_conn], query=w_query,
            chart_options={"title": w_caption} if w_caption else {},
        )
        try:
            result = asyncio.run(preview_query(draft.type, draft.connection_id, draft.query, connections))
            _render(draft, WidgetRun(widget_id=None, ok=True, result=result))
        except DashboardError as e:
            st.error(str(e))
    if c2.button("Save widget"):
        try:
            widgets.create(Widget(
                dashboard_id=current.id, title=w_title, type=WidgetType(w_type),
                connection_id=conn_options[w_conn], query=w_query,
                chart_options={"title": w_caption} if w_caption else {},
            ))
            st.rerun()
        except DashboardError as e:
            st.error(str(e))

board = widgets.list_for_dashboard(current.id)
if not board:
    st.caption("This dashboard has no widgets.")
    st.stop()

refresh = st.button("Refresh all")
if refresh or "runs" not in st.session_state:
    st.session_state["runs"] = {
        r.widget_id: r for r in asyncio.run(run_dashboard(board, connections))
    }

runs = st.session_state["runs"]
missing = [w for w in board if w.id not in runs]
if missing:
    runs.update({r.widget_id: r for r in asyncio.run(run_dashboard(missing, connections))})

cols = st.columns(2)
for i, w in enumerate(board):
    with cols[i % len(cols)]:
        _render(w, runs[w.id])
        if st.button("Remove", key=f"rm_{w.id}"):
            widgets.delete(w.id)
            runs.pop(w.id, None)
            st.rerun()
