"""
Curriculum catalog - The fixed phase and module tables.

The e-commerce realtime project ships six phases. Each phase folder holds
one HTML document per module plus an `Overview.html` entry page.
"""

from pathlib import Path
from typing import Optional

from phasenav.schemas import Curriculum, ModuleDescriptor, PhaseDefinition
from phasenav.utils.yaml_loader import load_yaml


PHASE_ENTRY_DOCUMENT = "Overview.html"

# Folder-style names seen in page URLs -> phase ids
FOLDER_PHASE_NAMES = {
    "BRD": "brd",
    "UI_UX": "uiux",
    "UI-UX": "uiux",
    "Architectural_Design": "architectural",
    "Development": "development",
    "Testing": "testing",
    "Deployment": "deployment",
}

MODULE_DESCRIPTIONS = {
    "overview": "Phase overview and objectives",
    "functional-requirements": "Core functionality specifications",
    "non-functional-requirements": "Performance and quality requirements",
    "user-stories": "User scenarios and use cases",
    "conclusion": "Summary and next steps",
    "design-system": "Color palette, typography, and components",
    "customer-pages": "Customer-facing pages and interfaces",
    "admin-pages": "Administrative interface and management",
    "navigation-flow": "User journey maps and navigation patterns",
    "system-architecture": "Overall system structure and components",
    "database-design": "Data models and relationships",
    "api-design": "RESTful APIs and endpoints",
    "security-architecture": "Security measures and protocols",
    "frontend-development": "React.js components and user interface",
    "backend-development": "Node.js API server and business logic",
    "database-implementation": "PostgreSQL setup and data models",
    "testing": "Unit testing and quality assurance",
    "test-planning": "Test strategy and test case development",
    "unit-testing": "Individual component and function testing",
    "integration-testing": "System integration and API testing",
    "performance-testing": "Load testing and performance optimization",
    "deployment-planning": "Deployment possibilities and setup strategies",
    "environment-setup": "Local and cloud environment configuration",
    "final-steps": "Project completion and code download",
}

# (phase id, label, folder, aliases, [(module id, file, label, icon), ...])
_PHASE_TABLE = [
    ("brd", "BRD", "BRD_phase", [], [
        ("overview", "Overview_Content.html", "Overview", "📋"),
        ("functional-requirements", "Functional_Requirements.html", "Functional Requirements", "⚙️"),
        ("non-functional-requirements", "Non_Functional_Requirements.html", "Non-Functional Requirements", "🎯"),
        ("user-stories", "User_Stories.html", "User Stories", "👥"),
        ("conclusion", "Conclusion.html", "Conclusion", "✅"),
    ]),
    ("uiux", "UI/UX", "UI_UX_phase", [], [
        ("overview", "Overview_Content.html", "Overview", "🎨"),
        ("design-system", "Design_System.html", "Design System", "🎨"),
        ("customer-pages", "Customer_Pages.html", "Customer Pages", "👥"),
        ("admin-pages", "Admin_Pages.html", "Admin Pages", "⚙️"),
        ("navigation-flow", "Navigation_Flow.html", "Navigation Flow", "🗺️"),
        ("conclusion", "Conclusion.html", "Conclusion", "✅"),
    ]),
    ("architectural", "Architecture", "Architectural_Design_phase", [], [
        ("overview", "Overview_Content.html", "Overview", "🏗️"),
        ("system-architecture", "System_Architecture.html", "System Architecture", "⚙️"),
        ("database-design", "Database_Design.html", "Database Design", "🗄️"),
        ("api-design", "API_Design.html", "API Design", "🔌"),
        ("security-architecture", "Security_Architecture.html", "Security Architecture", "🔒"),
        ("conclusion", "Conclusion.html", "Conclusion", "✅"),
    ]),
    ("development", "Development", "Development Phase", ["code-development"], [
        ("overview", "Overview_Content.html", "Overview", "💻"),
        ("frontend-development", "Frontend_Development.html", "Frontend Development", "🎨"),
        ("backend-development", "Backend_Development.html", "Backend Development", "⚙️"),
        ("database-implementation", "Database_Implementation.html", "Database Implementation", "🗄️"),
        ("testing", "Testing_QA.html", "Testing & QA", "🧪"),
        ("conclusion", "Conclusion.html", "Conclusion", "✅"),
    ]),
    ("testing", "Testing", "Testing_phase", [], [
        ("overview", "Overview_Content.html", "Overview", "🧪"),
        ("test-planning", "Test_Planning.html", "Test Planning", "📋"),
        ("unit-testing", "Unit_Testing.html", "Unit Testing", "🔬"),
        ("integration-testing", "Integration_Testing.html", "Integration Testing", "🔗"),
        ("performance-testing", "Performance_Testing.html", "Performance Testing", "⚡"),
        ("conclusion", "Conclusion.html", "Conclusion", "✅"),
    ]),
    ("deployment", "Deployment", "Deployment Phase", [], [
        ("overview", "Overview_Content.html", "Overview", "🚀"),
        ("deployment-planning", "Deployment_Planning.html", "Deployment Planning", "📋"),
        ("environment-setup", "Environment_Setup.html", "Environment Setup", "🏗️"),
        ("final-steps", "Final_Steps.html", "Final Steps", "🎉"),
    ]),
]


def _build_default_curriculum() -> Curriculum:
    phases = []
    for phase_id, label, folder, aliases, modules in _PHASE_TABLE:
        descriptors = [
            ModuleDescriptor(
                id=module_id,
                file=file,
                label=module_label,
                icon=icon,
                description=MODULE_DESCRIPTIONS.get(module_id, ""),
                is_terminal=idx == len(modules) - 1,
            )
            for idx, (module_id, file, module_label, icon) in enumerate(modules)
        ]
        phases.append(PhaseDefinition(
            id=phase_id,
            label=label,
            folder=folder,
            aliases=aliases,
            modules=descriptors,
        ))
    return Curriculum(project_id="ecommerce", title="E-commerce Platform", phases=phases)


DEFAULT_CURRICULUM = _build_default_curriculum()


def load_curriculum(path: Optional[Path] = None) -> Curriculum:
    """
    Load a curriculum catalog.

    Args:
        path: YAML file with `project_id`, `title` and `phases`; when None the
            built-in e-commerce curriculum is returned.

    Modules that do not set `is_terminal` get it inferred: the last module of
    each phase is terminal.
    """
    if path is None:
        return DEFAULT_CURRICULUM

    raw = load_yaml(path)
    for phase in raw.get("phases", []):
        modules = phase.get("modules", [])
        if modules and not any("is_terminal" in m for m in modules):
            modules[-1]["is_terminal"] = True
        for module in modules:
            module.setdefault("description", MODULE_DESCRIPTIONS.get(module.get("id", ""), ""))
    return Curriculum(**raw)
