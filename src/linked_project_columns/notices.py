"""Text of the synthetic note cards placed in the target column."""

from .models import ProjectColumn

AUTOMATION_NOTE_HEADER = "**DO NOT EDIT**"


def column_link(column: ProjectColumn) -> str:
    """Markdown link to a column on its project board."""
    url = column.url.replace("/columns/", "#column-")
    return f"['{column.name}' column]({url})"


def project_link(column: ProjectColumn) -> str:
    project = column.project
    if project.url:
        return f"[{project.name}]({project.url})"
    return project.name


def new_automation_note(source_columns: list[ProjectColumn]) -> str:
    """Banner explaining that the target column is maintained by automation."""
    if len(source_columns) == 1:
        column = source_columns[0]
        return (
            f"{AUTOMATION_NOTE_HEADER}\n"
            f"This column uses automation to mirror the {column_link(column)} from {project_link(column)}."
        )

    lines = [AUTOMATION_NOTE_HEADER, "This column uses automation to mirror the following columns:"]
    for column in source_columns:
        lines.append(f"- {column_link(column)} from {project_link(column)}")
    return "\n".join(lines)


def new_column_header_note(source_column: ProjectColumn) -> str:
    """Header placed above the cards mirrored from ``source_column``."""
    return f"**{source_column.project.name}: {source_column.name}**"
