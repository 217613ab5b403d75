from datetime import date
from types import SimpleNamespace

import pytest
from factories import (
    education_fields,
    experience_fields,
    profile_fields,
    project_fields,
    skill_fields,
)

from career_data_api.core.context import (
    SECTION_DIVIDER,
    CareerContext,
    build_context,
    format_month_year,
    group_skills,
    render_context,
)
from career_data_api.db.repository import create_career_store
from career_data_api.db.session import init_db, make_engine, make_session_factory
from career_data_api.errors import DatabaseError


@pytest.fixture()
def populated_store(store):
    store.profile.upsert(profile_fields())
    store.experiences.create(experience_fields())
    store.experiences.create(
        experience_fields(company="Globex", title="Engineer", startDate="2017-01-01", endDate="2021-02-01")
    )
    store.skills.create(skill_fields())
    store.skills.create(skill_fields(name="Terraform", roleRelevance="Infrastructure", level="advanced"))
    store.skills.create(skill_fields(name="Go", level="intermediate", rating=6, yearsOfExperience=3))
    store.projects.create(project_fields(challenge="Large fleets", outcome="Adopted by two teams"))
    store.educations.create(education_fields())
    return store


def test_build_context_collects_every_kind(populated_store) -> None:
    """Test the composite holds one fetch of each record kind."""
    context = build_context(populated_store)

    assert context.profile["personalInfo"]["name"] == "Jane Doe"
    assert [e["company"] for e in context.experiences] == ["Acme Corp", "Globex"]
    assert [s["name"] for s in context.skills] == ["Go", "Python", "Terraform"]
    assert len(context.projects) == 1
    assert len(context.educations) == 1


def test_build_context_without_profile(store) -> None:
    """Test an empty store yields an empty composite, not an error."""
    context = build_context(store)
    assert context == CareerContext()


def test_build_context_propagates_fetch_failure(store) -> None:
    """Test any failed fetch fails the whole aggregation."""

    def broken_list(filters=None):
        raise DatabaseError("Database operation failed. Please try again later.")

    failing = SimpleNamespace(
        profile=store.profile,
        experiences=store.experiences,
        skills=SimpleNamespace(list=broken_list),
        projects=store.projects,
        educations=store.educations,
    )

    with pytest.raises(DatabaseError):
        build_context(failing)


def test_render_context_is_deterministic(populated_store) -> None:
    """Test identical data renders byte-identical text."""
    first = render_context(build_context(populated_store))
    second = render_context(build_context(populated_store))
    assert first == second


def test_render_context_sections_in_fixed_order(populated_store) -> None:
    """Test every section is present and ordered."""
    text = render_context(build_context(populated_store))
    sections = text.split(SECTION_DIVIDER)

    assert [s.splitlines()[0] for s in sections] == [
        "## Profile",
        "## Work Experience",
        "## Skills",
        "## Projects",
        "## Education",
    ]
    assert "### Senior Engineer at Acme Corp" in text
    assert "Dates: Mar 2021 - Present" in text
    assert "Dates: Jan 2017 - Feb 2021" in text
    assert "- Cut delivery latency (Metrics: -35% p95)" in text
    assert "Challenge: Large fleets" in text
    assert "### MSc in Computer Science, TU Berlin (2016)" in text
    assert "GitHub: janedoe" in text


def test_render_context_omits_absent_optional_fields(store) -> None:
    """Test optional fields without values produce no line."""
    store.projects.create(project_fields(date=None))
    store.experiences.create(experience_fields(industry=None, roleTypes=[], technologies=[]))

    text = render_context(build_context(store))

    assert "Industry:" not in text
    assert "Role Types:" not in text
    assert "Date:" not in text
    assert "Approach:" not in text
    assert "Phone:" not in text


def test_render_context_states_empty_sections(store) -> None:
    """Test empty collections are stated explicitly."""
    text = render_context(build_context(store))

    assert "No profile recorded." in text
    assert "No work experience recorded." in text
    assert "No skills recorded." in text
    assert "No projects recorded." in text
    assert "No education recorded." in text


def test_group_skills_keeps_first_encountered_order() -> None:
    """Test groups appear in the order their first skill appears."""
    skills = [
        {"name": "Airflow", "roleRelevance": "Data"},
        {"name": "Go", "roleRelevance": "Backend"},
        {"name": "Spark", "roleRelevance": "Data"},
    ]

    groups = group_skills(skills)

    assert list(groups) == ["Data", "Backend"]
    assert [s["name"] for s in groups["Data"]] == ["Airflow", "Spark"]


def test_render_skills_grouped_under_relevance(populated_store) -> None:
    """Test skills render under their role relevance heading."""
    text = render_context(build_context(populated_store))
    skills_section = text.split(SECTION_DIVIDER)[2]

    assert skills_section.index("### Backend") < skills_section.index("### Infrastructure")
    assert "- Go (intermediate, rating 6, 3 years)" in skills_section
    assert "- Python (expert, rating 9, 8 years)" in skills_section


def test_render_skill_with_fractional_numbers(store) -> None:
    """Test fractional ratings and years render as given."""
    store.skills.create(skill_fields(rating=4.5, yearsOfExperience=2.5))

    text = render_context(build_context(store))

    assert "- Python (expert, rating 4.5, 2.5 years)" in text


def test_build_context_on_in_memory_database(clock) -> None:
    """Test worker-thread fetches see records written to an in-memory database."""
    engine = make_engine("sqlite:///:memory:")
    init_db(engine)
    try:
        memory_store = create_career_store(make_session_factory(engine), clock)
        memory_store.skills.create(skill_fields())

        context = build_context(memory_store)

        assert [s["name"] for s in context.skills] == ["Python"]
    finally:
        engine.dispose()


def test_format_month_year() -> None:
    """Test month-year formatting and open-ended dates."""
    assert format_month_year(date(2020, 1, 15)) == "Jan 2020"
    assert format_month_year(date(2023, 12, 1)) == "Dec 2023"
    assert format_month_year(None) == "Present"
