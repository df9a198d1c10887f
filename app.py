"""
PhaseNav - Progress-gated project walkthrough

Streamlit application that walks a learner through the phases of a
realtime project, one module at a time, unlocking content as it is
completed.

Usage:
    streamlit run app.py

Query parameters:
    page   URL of the hosting phase page (default: PHASENAV_PAGE_URL)
    phase  Phase id overriding the one derived from the page URL
"""

import logging

import streamlit as st

from phasenav.classroom import create_navigator
from phasenav.config import load_settings
from phasenav.viewer.navigation import (
    get_navigation_css,
    render_content,
    render_loading_placeholder,
    render_phase_bar,
    render_progress_list,
    render_sidebar,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="PhaseNav",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Build the navigator once per session (or after a phase change)."""
    if "page_url" not in st.session_state:
        st.session_state.page_url = st.query_params.get("page") or settings.page_url

    if "navigator" not in st.session_state:
        phase = st.query_params.get("phase")
        page_data = {"phase": phase} if phase else None
        nav = create_navigator(settings, page_url=st.session_state.page_url, page_data=page_data)
        st.session_state.navigator = nav
        outcome = nav.load_initial_content()
        st.session_state.notice = outcome.notice
        st.session_state.content = outcome.content


def set_notice(message):
    st.session_state.notice = message


# -----------------------------------------------------------------------------
# Sidebar: Modules
# -----------------------------------------------------------------------------

def render_module_sidebar():
    """Render module buttons and progress summary."""
    nav = st.session_state.navigator
    st.sidebar.title(f"🧭 {nav.phase.label}")

    stats = nav.progress.get_completion_stats()
    st.sidebar.markdown(
        f"**Progress:** {stats['completed']}/{stats['total_modules']} modules ({stats['completion_percent']}%)"
    )
    st.sidebar.progress(stats["completion_percent"] / 100)
    st.sidebar.divider()

    items = nav.sidebar_items()
    st.sidebar.markdown(get_navigation_css(), unsafe_allow_html=True)
    st.sidebar.markdown(render_sidebar(items), unsafe_allow_html=True)

    for item in items:
        if st.sidebar.button(
            f"{item.icon} {item.module.label}",
            key=f"tab_{item.module.id}",
            disabled=item.active,
            help=item.description,
            use_container_width=True,
        ):
            select_module(item.module.id)


def select_module(module_id: str):
    """Switch tabs, keeping the current module on rejection."""
    outcome = st.session_state.navigator.switch_tab(module_id)
    set_notice(outcome.notice)
    if outcome.allowed:
        st.session_state.content = outcome.content
    st.rerun()


# -----------------------------------------------------------------------------
# Phase Bar
# -----------------------------------------------------------------------------

def render_phase_selector():
    """Render the phase bar with one button per phase."""
    nav = st.session_state.navigator
    items = nav.phase_bar()

    st.markdown(render_phase_bar(items), unsafe_allow_html=True)
    cols = st.columns(len(items))
    for col, item in zip(cols, items):
        with col:
            label = item.phase.label if item.unlocked else f"🔒 {item.phase.label}"
            if st.button(label, key=f"phase_{item.display_id}", disabled=item.current,
                         use_container_width=True):
                open_phase(item.display_id)


def open_phase(phase_id: str):
    """Follow a phase redirect by rebuilding the navigator for its entry page."""
    outcome = st.session_state.navigator.navigate_to_phase(phase_id)
    if not outcome.allowed:
        set_notice(outcome.notice)
        st.rerun()
        return

    logger.info(f"Navigating to phase {outcome.phase}: {outcome.url}")
    st.session_state.navigator.loader.close()
    st.session_state.page_url = outcome.url
    st.query_params.clear()
    st.query_params["page"] = outcome.url
    del st.session_state["navigator"]
    st.rerun()


# -----------------------------------------------------------------------------
# Main Content
# -----------------------------------------------------------------------------

def render_module_view():
    """Render notice, progress dots, content and the next control."""
    nav = st.session_state.navigator

    if st.session_state.notice:
        st.warning(st.session_state.notice)

    st.markdown(render_progress_list(nav.progress_items()), unsafe_allow_html=True)

    current, total = nav.get_position()
    st.caption(f"Module {current} of {total}")

    content = st.session_state.content
    if content is not None:
        st.markdown(render_content(content), unsafe_allow_html=True)
    else:
        label = nav.phase.get_module(nav.current_module).label
        st.markdown(render_loading_placeholder(label), unsafe_allow_html=True)

    st.divider()
    render_next_control()


def render_next_control():
    nav = st.session_state.navigator
    if not nav.show_next:
        render_completion_control()
        return

    col1, col2, col3 = st.columns([1, 2, 1])
    with col3:
        if st.button("Next →", type="primary", use_container_width=True):
            outcome = nav.go_to_next()
            set_notice(outcome.notice)
            if outcome.allowed:
                st.session_state.content = outcome.content
            st.rerun()


def render_completion_control():
    """Terminal modules are finished explicitly; completing one opens the next phase."""
    nav = st.session_state.navigator
    if nav.is_module_completed(nav.current_module):
        st.success("✅ Phase complete")
        return

    if st.button("Mark phase as complete", type="primary", use_container_width=True):
        outcome = nav.complete_current()
        if outcome.unlock and outcome.unlock.unlocked_phases:
            set_notice(None)
            st.toast(f"Unlocked: {', '.join(outcome.unlock.unlocked_phases)}")
        st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    render_module_sidebar()
    render_phase_selector()
    render_module_view()


if __name__ == "__main__":
    main()
