"""Prompt builders and synthesized boilerplate files."""
from __future__ import annotations

import html
from typing import Iterable

from .parser import render_generated_files
from .types import GeneratedFile, Task

_FORMAT_EXAMPLE = render_generated_files([GeneratedFile(path="filename.ext", content="<complete file content>")])


def build_app_prompt(task: Task) -> str:
    sections = [
        "You are a professional full-stack web developer.",
        "Generate a fully working, interactive web application that satisfies this brief:",
        task.brief,
        (
            "Requirements:\n"
            "- It must work offline by opening index.html in a browser; no API keys or external URLs.\n"
            "- Use a single HTML file when that is enough, otherwise add the CSS and JS files it needs.\n"
            "- Replace any external data the brief depends on with local sample data.\n"
            "- Provide real interactivity (forms, buttons, inputs, visual feedback).\n"
            "- Clean, responsive layout with accessible contrast.\n"
            "- Files contain only code: no markdown fences, explanations, or delimiter lines."
        ),
    ]
    if task.attachments:
        listing = "\n".join(f"- {item.name}: {item.url}" for item in task.attachments)
        sections.append("Attachments available to the app:\n" + listing)
    if task.checks:
        sections.append("The result will be checked against:\n" + "\n".join(f"- {check}" for check in task.checks))
    sections.append("Output only the necessary files, each introduced by a delimiter line:\n\n" + _FORMAT_EXAMPLE)
    return "\n\n".join(sections).strip()


def build_readme_prompt(task: Task, paths: Iterable[str]) -> str:
    return (
        "You are a documentation writer.\n"
        "Write a clear, self-explanatory README.md for the project below.\n\n"
        f"Brief:\n{task.brief}\n\n"
        f"Files:\n{', '.join(paths)}"
    )


def build_license(owner: str, year: int) -> str:
    return f"MIT License\n\nCopyright (c) {year} {owner}"


def fallback_index(raw_output: str) -> GeneratedFile:
    """Wrap unparseable generation output so the project still has a page."""
    return GeneratedFile(
        path="index.html",
        content=f"<html><body><pre>{html.escape(raw_output, quote=False)}</pre></body></html>",
    )


__all__ = ["build_app_prompt", "build_license", "build_readme_prompt", "fallback_index"]
