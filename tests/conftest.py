from __future__ import annotations

from pathlib import Path

import pytest

import resume_builder.data.db as app_db
from resume_builder.data.db import init_db
from resume_builder.models import (
    CertificationItem,
    ContactInfo,
    EducationItem,
    ExperienceItem,
    ProjectItem,
    ResumeDocument,
    SkillSet,
)
from resume_builder.services.form_store import FormStateStore
from resume_builder.services.local_storage import LocalStorage


@pytest.fixture
def tmp_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Use a temporary SQLite DB as local storage."""
    db_path = tmp_path / "storage.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    app_db.dispose_engine()
    init_db()
    yield
    # Dispose engine to release connections
    app_db.dispose_engine()


@pytest.fixture
def storage(tmp_db: None) -> LocalStorage:
    return LocalStorage()


@pytest.fixture
def store(storage: LocalStorage) -> FormStateStore:
    return FormStateStore.load(storage)


@pytest.fixture
def full_document() -> ResumeDocument:
    """A document with every section filled in."""
    return ResumeDocument(
        contact=ContactInfo(
            full_name="Asha Rao",
            email="asha@example.com",
            phone="+919876543210",
            linkedin="linkedin.com/in/asha",
            github="https://github.com/asha",
            website="asha.dev",
        ),
        about="Final-year CSE student who likes building web apps.",
        experience=[
            ExperienceItem(
                role="Intern",
                company="Acme",
                location="Pune",
                start="Jan 2024",
                end="Jun 2024",
                description="Built internal dashboards.",
            )
        ],
        projects=[
            ProjectItem(
                name="Resume Builder",
                link="resume.example.com",
                repo="github.com/asha/resume",
                tech="Python, FastAPI",
                description="Form-driven resume editor.",
            )
        ],
        certifications=[
            CertificationItem(
                title="AWS Cloud Practitioner",
                issuer="Amazon",
                year="2024",
                link="https://aws.example.com/cert",
            )
        ],
        skills=SkillSet(tech_tools=["Python", "SQL"], soft_skills=["Teamwork"]),
        education=[
            EducationItem(
                degree="B.Tech in CSE",
                school="IIT Example",
                start="2021",
                end="2025",
                score="8.9 CGPA",
            )
        ],
        certificates_link="drive.example.com/certs",
    )
