from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, Text

from career_data_api.db.base import Base

PROFILE_SLOT = 1


class CareerProfile(Base):
    __tablename__ = "career_profiles"

    id = Column(String(32), primary_key=True)
    # Singleton marker; upserts conflict on this column so only one row can exist.
    slot = Column(Integer, nullable=False, unique=True, default=PROFILE_SLOT)
    personal_info = Column(JSON, nullable=False, default=dict)
    positioning = Column(JSON, nullable=False, default=dict)
    value_propositions = Column(JSON, nullable=False, default=list)
    professional_mission = Column(Text, nullable=False, default="")
    unique_selling_points = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class Experience(Base):
    __tablename__ = "experiences"

    id = Column(String(32), primary_key=True)
    company = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    title = Column(String(255), nullable=False)
    industry = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    role_types = Column(JSON, nullable=False, default=list)
    responsibilities = Column(JSON, nullable=False, default=list)
    achievements = Column(JSON, nullable=False, default=list)
    technologies = Column(JSON, nullable=False, default=list)
    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    role_relevance = Column(String(255), nullable=False)
    level = Column(String(64), nullable=False)
    rating = Column(Float, nullable=False)
    years_of_experience = Column(Float, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    keywords = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(128), nullable=False)
    date = Column(Date, nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    overview = Column(Text, nullable=False)
    challenge = Column(Text, nullable=True)
    approach = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    impact = Column(Text, nullable=True)
    technologies = Column(JSON, nullable=False, default=list)
    keywords = Column(JSON, nullable=False, default=list)
    role_types = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class Education(Base):
    __tablename__ = "educations"

    id = Column(String(32), primary_key=True)
    institution = Column(String(255), nullable=False)
    degree = Column(String(255), nullable=False)
    field = Column(String(255), nullable=False)
    graduation_year = Column(Integer, nullable=False)
    relevant_coursework = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
