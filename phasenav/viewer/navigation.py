"""
Navigation renderer - HTML for the sidebar, progress list and content pane.

Pure functions over the navigator's view models; the Streamlit app places
the returned markup with `st.markdown(..., unsafe_allow_html=True)`.
"""

import html
from typing import Optional

from phasenav.classroom.navigator import (
    PhaseBarItem,
    ProgressItem,
    RenderedContent,
    SidebarItem,
)


def get_navigation_css() -> str:
    """Get CSS styles for navigation display."""
    return """
    <style>
    .nav-sidebar {
        display: flex;
        flex-direction: column;
        gap: 0.4em;
    }
    .nav-item {
        display: flex;
        align-items: flex-start;
        gap: 0.7em;
        padding: 0.7em 0.9em;
        border-radius: 8px;
        border: 1px solid #E2E8F0;
        background: #FFFFFF;
    }
    .nav-item.active {
        border-color: #3182CE;
        background: #EBF8FF;
    }
    .nav-item.locked {
        opacity: 0.55;
        background: #F7FAFC;
    }
    .nav-item.completed .nav-title {
        color: #2F855A;
    }
    .nav-icon {
        font-size: 1.2em;
        line-height: 1.4;
    }
    .nav-title {
        font-weight: 600;
        color: #2D3748;
    }
    .nav-description {
        font-size: 0.85em;
        color: #718096;
    }
    .progress-list {
        display: flex;
        gap: 0.5em;
        margin: 0.8em 0;
    }
    .progress-item {
        display: flex;
        align-items: center;
        gap: 0.3em;
        font-size: 0.8em;
        color: #A0AEC0;
    }
    .progress-item.active {
        color: #2B6CB0;
        font-weight: 600;
    }
    .progress-dot {
        width: 8px;
        height: 8px;
        border-radius: 50%;
        background: #CBD5E0;
    }
    .progress-item.active .progress-dot {
        background: #3182CE;
    }
    .phase-bar {
        display: flex;
        gap: 0.5em;
        flex-wrap: wrap;
    }
    .phase-pill {
        padding: 0.3em 0.9em;
        border-radius: 999px;
        border: 1px solid #CBD5E0;
        font-size: 0.85em;
    }
    .phase-pill.current {
        background: #3182CE;
        border-color: #3182CE;
        color: white;
    }
    .phase-pill.locked {
        color: #A0AEC0;
    }
    .loading-placeholder {
        padding: 2em;
        text-align: center;
        color: #718096;
    }
    .error-card {
        padding: 1.5em;
        border-radius: 8px;
        border-left: 4px solid #E53E3E;
        background: #FFF5F5;
        color: #742A2A;
    }
    .error-card h3 {
        margin-top: 0;
    }
    </style>
    """


def render_sidebar_item(item: SidebarItem) -> str:
    """Render a single module entry."""
    classes = ["nav-item"]
    if item.active:
        classes.append("active")
    if not item.unlocked:
        classes.append("locked")
    if item.completed:
        classes.append("completed")

    return f"""
    <div class="{' '.join(classes)}" data-tab="{html.escape(item.module.id)}">
        <span class="nav-icon">{item.icon}</span>
        <div>
            <div class="nav-title">{html.escape(item.module.label)}</div>
            <div class="nav-description">{html.escape(item.description)}</div>
        </div>
    </div>
    """


def render_sidebar(items: list[SidebarItem]) -> str:
    """
    Render the module sidebar.

    Args:
        items: SidebarItem list from PhaseNavigator.sidebar_items()

    Returns:
        HTML string, empty if there are no items
    """
    if not items:
        return ""
    entries = "".join(render_sidebar_item(item) for item in items)
    return f'<div class="nav-sidebar">{entries}</div>'


def render_progress_list(items: list[ProgressItem]) -> str:
    """Render the progress dots, highlighting the current module."""
    parts = []
    for item in items:
        cls = "progress-item active" if item.active else "progress-item"
        parts.append(
            f'<div class="{cls}"><span class="progress-dot"></span>'
            f'<span>{html.escape(item.label)}</span></div>'
        )
    return f'<div class="progress-list">{"".join(parts)}</div>'


def render_phase_bar(items: list[PhaseBarItem]) -> str:
    """Render the phase pills; locked phases carry the lock icon."""
    parts = []
    for item in items:
        classes = ["phase-pill"]
        if item.current:
            classes.append("current")
        label = html.escape(item.phase.label)
        if not item.unlocked:
            classes.append("locked")
            label = f"🔒 {label}"
        parts.append(
            f'<span class="{" ".join(classes)}" data-phase="{html.escape(item.display_id)}">{label}</span>'
        )
    return f'<div class="phase-bar">{"".join(parts)}</div>'


def render_loading_placeholder(label: Optional[str] = None) -> str:
    """Render the placeholder shown while a module is fetched."""
    text = f"Loading {html.escape(label)}..." if label else "Loading..."
    return f'<div class="loading-placeholder">{text}</div>'


def render_error_card(source_file: Optional[str], message: str) -> str:
    """
    Render the inline error shown in place of module content.

    Names the missing file and the underlying error message.
    """
    file_name = html.escape(source_file or "content")
    return f"""
    <div class="error-card">
        <h3>Content Loading Error</h3>
        <p>Unable to load content. Please ensure the file {file_name} exists.</p>
        <p><small>Error: {html.escape(message)}</small></p>
    </div>
    """


def render_content(content: RenderedContent) -> str:
    """Fragment markup when loading succeeded, otherwise the error card."""
    if content.ok:
        return content.html
    return render_error_card(content.source_file, content.error or "")
