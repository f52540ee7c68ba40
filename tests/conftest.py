from __future__ import annotations

import pytest
from hypothesis import HealthCheck, settings

from writ_form import Advocate, Annexure, Application, Petitioner, Respondent, WritFormData

settings.register_profile(
    "ci",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.load_profile("ci")


def build_form(**overrides) -> WritFormData:
    fields = {
        "year": "2025",
        "filing_date": "14.02.2025",
        "petitioners": [Petitioner(name="Ravi Kumar", addresses=["12 Lodhi Road"], city="New Delhi",
                                   pin="110003", state="Delhi")],
        "respondents": [Respondent(name="Union of India", addresses=["North Block"], city="New Delhi",
                                   pin="110001", state="Delhi")],
        "advocates": [Advocate(name="A. Sharma", enrolment_number="D/123/2010",
                               phone_numbers=["9810000000"], email="sharma@example.com")],
    }
    fields.update(overrides)
    return WritFormData(**fields)


@pytest.fixture
def make_form():
    return build_form


@pytest.fixture
def full_form():
    return build_form(
        include_listing_proforma=True,
        include_certificate=True,
        include_index_notes=True,
        petition_grounds="the order is arbitrary\nthe order is **without jurisdiction**\n\nno hearing was given",
        petition_facts="The petitioner is a retired officer.",
        petition_prayers="Quash the impugned order dated 01.01.2025.",
        annexures=[Annexure(title="Impugned order", page_count="2"), Annexure(title="Representation")],
        applications=[Application(description="exemption from filing certified copies")],
        letter_of_authority_upload="loa.pdf",
        proof_of_service_uploads=["receipt-1.jpg", "receipt-2.jpg"],
    )
