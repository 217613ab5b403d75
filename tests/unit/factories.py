"""Valid record payloads for tests; pass keyword overrides to vary one field."""


def experience_fields(**overrides):
    data = {
        "company": "Acme Corp",
        "location": "Berlin, Germany",
        "title": "Senior Engineer",
        "industry": "Logistics",
        "startDate": "2021-03-01",
        "roleTypes": ["backend"],
        "responsibilities": ["Own the routing service"],
        "achievements": [{"description": "Cut delivery latency", "metrics": "-35% p95"}],
        "technologies": ["Python", "PostgreSQL"],
    }
    data.update(overrides)
    return data


def skill_fields(**overrides):
    data = {
        "name": "Python",
        "roleRelevance": "Backend",
        "level": "expert",
        "rating": 9,
        "yearsOfExperience": 8,
        "tags": ["language"],
        "keywords": ["fastapi"],
    }
    data.update(overrides)
    return data


def project_fields(**overrides):
    data = {
        "name": "Route Planner",
        "type": "open-source",
        "date": "2023-05-01",
        "overview": "Vehicle routing library",
        "technologies": ["Python"],
        "keywords": ["optimization"],
    }
    data.update(overrides)
    return data


def education_fields(**overrides):
    data = {
        "institution": "TU Berlin",
        "degree": "MSc",
        "field": "Computer Science",
        "graduationYear": 2016,
        "relevantCoursework": ["Algorithms"],
    }
    data.update(overrides)
    return data


def profile_fields(**overrides):
    data = {
        "personalInfo": {"name": "Jane Doe", "email": "jane@example.com", "github": "janedoe"},
        "positioning": {
            "headline": "Backend engineer",
            "summary": "Builds reliable data services.",
            "targetRoles": ["Staff Engineer"],
            "targetIndustries": ["Logistics"],
        },
        "valuePropositions": ["Ships reliable systems"],
        "professionalMission": "Make logistics software dependable.",
        "uniqueSellingPoints": ["Operations background"],
    }
    data.update(overrides)
    return data
