# This project was developed with assistance from AI tools.
"""UserContext personas shared by functional tests."""

from db.enums import UserRole

from src.schemas.auth import DataScope, UserContext

SUPERADMIN = UserContext(
    user_id="superadmin-1",
    role=UserRole.SUPERADMIN,
    email="mswdo@santamaria.gov.ph",
    name="Municipal Office",
    data_scope=DataScope(all_barangays=True),
)

BARANGAY_ADMIN = UserContext(
    user_id="brgy-poblacion",
    role=UserRole.BARANGAY_ADMIN,
    email="poblacion@santamaria.gov.ph",
    name="Poblacion Desk",
    data_scope=DataScope(barangay="Poblacion"),
)

OTHER_BARANGAY_ADMIN = UserContext(
    user_id="brgy-bagbaguin",
    role=UserRole.BARANGAY_ADMIN,
    email="bagbaguin@santamaria.gov.ph",
    name="Bagbaguin Desk",
    data_scope=DataScope(barangay="Bagbaguin"),
)


def applicant_user(email: str = "maria.santos@example.com") -> UserContext:
    return UserContext(
        user_id=f"kc-{email}",
        role=UserRole.APPLICANT,
        email=email,
        name="Maria Santos",
        data_scope=DataScope(own_data_only=True, user_id=f"kc-{email}"),
    )
