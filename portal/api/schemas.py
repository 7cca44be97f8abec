from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from portal.domain.entities.booking import (
    AppointmentDetails,
    AppointmentType,
    AvailabilityDate,
    BookingConfirmation,
    TimeSlot,
)
from portal.domain.entities.records import (
    AccountProfile,
    ChangeRequest,
    Project,
    ProjectDetail,
    Subscription,
    TeamMember,
    UserInvite,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AppointmentTypeSchema(CamelModel):
    id: int
    name: str
    duration: int
    price: str | None = None
    description: str | None = None

    @classmethod
    def from_entity(cls, item: AppointmentType) -> "AppointmentTypeSchema":
        return cls(
            id=item.id,
            name=item.name,
            duration=item.duration,
            price=item.price,
            description=item.description,
        )


class AvailabilityDateSchema(CamelModel):
    date: str
    available: bool


class AvailabilityDatesSchema(CamelModel):
    dates: list[AvailabilityDateSchema]

    @classmethod
    def from_entities(cls, dates: list[AvailabilityDate]) -> "AvailabilityDatesSchema":
        return cls(dates=[AvailabilityDateSchema(date=d.date, available=d.available) for d in dates])


class TimeSlotSchema(CamelModel):
    datetime: str


class AvailabilityTimesSchema(CamelModel):
    times: list[TimeSlotSchema]

    @classmethod
    def from_entities(cls, times: list[TimeSlot]) -> "AvailabilityTimesSchema":
        return cls(times=[TimeSlotSchema(datetime=t.datetime) for t in times])


class BookingConfirmationSchema(CamelModel):
    appointment_id: int
    datetime: str
    first_name: str
    last_name: str
    email: str
    phone: str
    message: str

    @classmethod
    def from_entity(cls, item: BookingConfirmation) -> "BookingConfirmationSchema":
        return cls(
            appointment_id=item.appointment_id,
            datetime=item.datetime,
            first_name=item.first_name,
            last_name=item.last_name,
            email=item.email,
            phone=item.phone,
            message=item.message,
        )


class AppointmentDetailsSchema(CamelModel):
    id: int
    datetime: str
    first_name: str
    last_name: str
    email: str
    phone: str
    timezone: str | None = None
    appointment_type_name: str | None = None
    status: str | None = None

    @classmethod
    def from_entity(cls, item: AppointmentDetails) -> "AppointmentDetailsSchema":
        return cls(
            id=item.id,
            datetime=item.datetime,
            first_name=item.first_name,
            last_name=item.last_name,
            email=item.email,
            phone=item.phone,
            timezone=item.timezone,
            appointment_type_name=item.appointment_type_name,
            status=item.status,
        )


class TimelinePhaseSchema(CamelModel):
    phase: str
    completed: bool
    date: str | None = None


class ProjectSchema(CamelModel):
    id: str
    name: str
    status: str
    progress: int
    description: str
    start_date: str
    launch_date: str | None = None
    user_id: str
    website_url: str | None = None

    @classmethod
    def from_entity(cls, item: Project) -> "ProjectSchema":
        return cls(
            id=item.id,
            name=item.name,
            status=item.status,
            progress=item.progress,
            description=item.description,
            start_date=item.start_date,
            launch_date=item.launch_date,
            user_id=item.user_id,
            website_url=item.website_url,
        )


class ProjectDetailSchema(ProjectSchema):
    domain: str | None = None
    ssl_status: str | None = None
    uptime: float | None = None
    page_load_time: int | None = None
    hosting_region: str | None = None
    timeline: list[TimelinePhaseSchema] = Field(default_factory=list)

    @classmethod
    def from_detail(cls, detail: ProjectDetail) -> "ProjectDetailSchema":
        base = ProjectSchema.from_entity(detail.project).model_dump()
        return cls(
            **base,
            domain=detail.domain,
            ssl_status=detail.ssl_status,
            uptime=detail.uptime,
            page_load_time=detail.page_load_time,
            hosting_region=detail.hosting_region,
            timeline=[
                TimelinePhaseSchema(phase=p.phase, completed=p.completed, date=p.date) for p in detail.timeline
            ],
        )


class ChangeRequestInSchema(CamelModel):
    project_id: str | None = None
    title: str | None = None
    description: str | None = None
    category: str | None = None
    priority: str | None = None


class ChangeRequestSchema(CamelModel):
    id: str
    project_id: str
    title: str
    description: str
    category: str
    priority: str
    status: str
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, item: ChangeRequest) -> "ChangeRequestSchema":
        return cls(
            id=item.id,
            project_id=item.project_id,
            title=item.title,
            description=item.description,
            category=item.category,
            priority=item.priority,
            status=item.status,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class ProfileUpdateSchema(CamelModel):
    name: str | None = None
    email: str | None = None
    company: str | None = None


class AccountProfileSchema(CamelModel):
    id: str
    name: str
    email: str
    company: str | None = None

    @classmethod
    def from_entity(cls, item: AccountProfile) -> "AccountProfileSchema":
        return cls(id=item.id, name=item.name, email=item.email, company=item.company)


class SubscriptionSchema(CamelModel):
    id: str
    plan: str
    status: str
    renewal_date: str

    @classmethod
    def from_entity(cls, item: Subscription) -> "SubscriptionSchema":
        return cls(id=item.id, plan=item.plan, status=item.status, renewal_date=item.renewal_date)


class TeamMemberSchema(CamelModel):
    id: str
    email: str
    name: str
    role: str
    permissions: list[str]
    joined_at: str
    status: str

    @classmethod
    def from_entity(cls, item: TeamMember) -> "TeamMemberSchema":
        return cls(
            id=item.id,
            email=item.email,
            name=item.name,
            role=item.role,
            permissions=list(item.permissions),
            joined_at=item.joined_at,
            status=item.status,
        )


class InviteInSchema(CamelModel):
    email: str | None = None
    role: str | None = None
    permissions: list[str] = Field(default_factory=list)


class PermissionsUpdateSchema(CamelModel):
    role: str | None = None
    permissions: list[str] | None = None


class UserInviteSchema(CamelModel):
    id: str
    email: str
    role: str
    permissions: list[str]
    created_at: str
    expires_at: str
    status: str

    @classmethod
    def from_entity(cls, item: UserInvite) -> "UserInviteSchema":
        return cls(
            id=item.id,
            email=item.email,
            role=item.role,
            permissions=list(item.permissions),
            created_at=item.created_at,
            expires_at=item.expires_at,
            status=item.status,
        )

