from typing import Any, Dict, List, Optional

PLACEHOLDER_NAME = "________________"


def _freeze(value):
    """Turn nested records, lists and dicts into hashable tuples."""
    if isinstance(value, _Record):
        return value.snapshot()
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items()))
    return value


def _text(value) -> str:
    if value is None:
        return ""
    return str(value)


def _optional_text(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _text_list(value, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list of strings.")
    return [_text(v) for v in value]


def _pick(data: Dict[str, Any], key: str, camel: str, default=None):
    """Read a key in snake_case or in the camelCase the form editor saves."""
    if key in data:
        return data[key]
    return data.get(camel, default)


class _Record:
    """Value semantics shared by every form entity."""

    def snapshot(self):
        return (type(self).__name__,) + tuple(
            (k, _freeze(v)) for k, v in sorted(vars(self).items())
        )

    def __eq__(self, other):
        if not isinstance(other, _Record):
            return NotImplemented
        return self.snapshot() == other.snapshot()

    # Records are mutated in place; use snapshot() as a key.
    __hash__ = None

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


def _entities(data: Dict[str, Any], key: str, camel: str, cls) -> list:
    items = _pick(data, key, camel)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError(f"{key} must be a list.")
    out = []
    for idx, item in enumerate(items):
        if isinstance(item, cls):
            out.append(item)
        elif isinstance(item, dict):
            out.append(cls.from_dict(item))
        else:
            raise ValueError(f"{key}[{idx}] must be a mapping.")
    return out


class Party(_Record):
    """
    A petitioner or respondent as it appears in the memo of parties.

    Parameters:
        name (str): Full name of the party.
        auth_rep (str, optional): Authorised representative acting for the party.
        addresses (List[str]): Address lines, in display order.
        city, pin, state (str): Trailing address line.
        email (str, optional): Service email, printed for respondents.
    """

    def __init__(
        self,
        name: str = "",
        auth_rep: Optional[str] = None,
        addresses: Optional[List[str]] = None,
        city: str = "",
        pin: str = "",
        state: str = "",
        email: Optional[str] = None
    ) -> None:
        self.name = _text(name).strip()
        self.auth_rep = _optional_text(auth_rep)
        self.addresses = list(addresses or [])
        self.city = _text(city).strip()
        self.pin = _text(pin).strip()
        self.state = _text(state).strip()
        self.email = _optional_text(email)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        addresses = _pick(data, "addresses", "addresses")
        if addresses is None and "address" in data:
            addresses = data["address"]
        return cls(
            name=data.get("name", ""),
            auth_rep=_pick(data, "auth_rep", "authRep"),
            addresses=_text_list(addresses, "addresses"),
            city=data.get("city", ""),
            pin=data.get("pin", ""),
            state=data.get("state", ""),
            email=data.get("email"),
        )


class Petitioner(Party):
    pass


class Respondent(Party):
    pass


class Advocate(_Record):
    def __init__(
        self,
        name: str = "",
        enrolment_number: str = "",
        addresses: Optional[List[str]] = None,
        phone_numbers: Optional[List[str]] = None,
        email: str = ""
    ) -> None:
        self.name = _text(name).strip()
        self.enrolment_number = _text(enrolment_number).strip()
        self.addresses = list(addresses or [])
        self.phone_numbers = list(phone_numbers or [])
        self.email = _text(email).strip()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls(
            name=data.get("name", ""),
            enrolment_number=_pick(data, "enrolment_number", "enrolmentNumber", ""),
            addresses=_text_list(data.get("addresses"), "addresses"),
            phone_numbers=_text_list(_pick(data, "phone_numbers", "phoneNumbers"), "phone_numbers"),
            email=data.get("email", ""),
        )


class Annexure(_Record):
    """
    An attached supporting document.

    page_count is kept exactly as the form supplied it (usually a string typed
    by the user or written by the PDF page detector); pagination parses it.
    content_text is a typed transcript printed on the annexure's first page.
    """

    def __init__(
        self,
        title: str = "",
        page_count: Any = "1",
        file: Optional[str] = None,
        content_text: str = ""
    ) -> None:
        self.title = _text(title).strip()
        self.page_count = page_count
        self.file = _optional_text(file)
        self.content_text = _text(content_text)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        file = data.get("file")
        files = data.get("files")
        if file is None and isinstance(files, list) and files:
            file = files[0]
        return cls(
            title=data.get("title", ""),
            page_count=_pick(data, "page_count", "pageCount", "1"),
            file=file,
            content_text=_pick(data, "content_text", "contentText", ""),
        )


class Application(_Record):
    """
    A miscellaneous application filed with the petition.

    With use_main_affidavit the application's affidavit adopts the main
    affidavit of the petition, including its verification date when the
    application has none of its own.
    """

    def __init__(
        self,
        description: str = "",
        showeth_content: str = "",
        prayer_content: str = "",
        use_main_affidavit: bool = True,
        verification_date: Optional[str] = None
    ) -> None:
        self.description = _text(description).strip()
        self.showeth_content = _text(showeth_content)
        self.prayer_content = _text(prayer_content)
        self.use_main_affidavit = True if use_main_affidavit is None else bool(use_main_affidavit)
        self.verification_date = _optional_text(verification_date)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls(
            description=data.get("description", ""),
            showeth_content=_pick(data, "showeth_content", "showethContent", ""),
            prayer_content=_pick(data, "prayer_content", "prayerContent", ""),
            use_main_affidavit=_pick(data, "use_main_affidavit", "useMainAffidavit", True),
            verification_date=_pick(data, "verification_date", "verificationDate"),
        )


class DateEntry(_Record):
    def __init__(self, dates: Optional[List[str]] = None, event: str = "") -> None:
        self.dates = list(dates or [])
        self.event = _text(event)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls(dates=_text_list(data.get("dates"), "dates"), event=data.get("event", ""))


class NoteEntry(_Record):
    def __init__(self, text: str = "") -> None:
        self.text = _text(text)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls(text=data.get("text", ""))


# (attribute, camelCase key, default) for every scalar field of the form.
SCALAR_FIELDS = (
    ("high_court", "highCourt", "IN THE HIGH COURT OF DELHI AT NEW DELHI"),
    ("jurisdiction", "jurisdiction", "EXTRAORDINARY CIVIL WRIT JURISDICTION"),
    ("petition_type", "petitionType", "Civil"),
    ("year", "year", ""),
    ("location", "location", "New Delhi"),
    ("filing_date", "filingDate", ""),
    ("court_fee_uin", "courtFeeUin", ""),
    ("court_fee_amount", "courtFeeAmount", "500"),
    ("court_fee_attachment", "courtFeeAttachment", None),
    ("court_fee_attachment_pages", "courtFeeAttachmentPages", None),
    ("letter_of_authority_upload", "letterOfAuthorityUpload", None),
    ("urgent_pin_code", "urgentPinCode", "110003"),
    ("urgent_content", "urgentContent", ""),
    ("certificate_content", "certificateContent", ""),
    ("notice_addressed_to", "noticeAddressedTo", ""),
    ("notice_designation", "noticeDesignation", ""),
    ("notice_org", "noticeOrg", ""),
    ("notice_office", "noticeOffice", ""),
    ("notice_location", "noticeLocation", ""),
    ("notice_hearing_date", "noticeHearingDate", ""),
    ("synopsis_description", "synopsisDescription", ""),
    ("synopsis_content", "synopsisContent", ""),
    ("petition_description_main", "petitionDescriptionMain", ""),
    ("petition_showeth", "petitionShoweth", ""),
    ("petition_facts", "petitionFacts", ""),
    ("petition_grounds", "petitionGrounds", ""),
    ("petition_prayers", "petitionPrayers", ""),
    ("ground_enumeration_type", "groundEnumerationType", "Alpha"),
    ("affidavit_identity", "affidavitIdentity", "Petitioner"),
    ("affidavit_name", "affidavitName", ""),
    ("affidavit_age", "affidavitAge", ""),
    ("affidavit_address", "affidavitAddress", ""),
    ("affidavit_location", "affidavitLocation", "New Delhi"),
    ("verification_date", "verificationDate", ""),
)

FLAG_FIELDS = (
    ("include_listing_proforma", "includeListingProforma"),
    ("include_certificate", "includeCertificate"),
    ("include_index_notes", "includeIndexNotes"),
)

ENTITY_FIELDS = (
    ("petitioners", "petitioners", Petitioner),
    ("respondents", "respondents", Respondent),
    ("advocates", "advocates", Advocate),
    ("annexures", "annexures", Annexure),
    ("applications", "applications", Application),
    ("date_list", "dateList", DateEntry),
    ("notes", "notes", NoteEntry),
)


class WritFormData(_Record):
    """
    The complete input of one writ petition bundle, as filled in by the form.

    Scalar fields default to the values the editor starts with; every list
    defaults to empty. Keyword arguments not listed in SCALAR_FIELDS,
    FLAG_FIELDS or ENTITY_FIELDS (plus proof_of_service_uploads and
    proof_of_service_page_counts) are rejected.

    proof_of_service_page_counts runs parallel to proof_of_service_uploads and
    holds the page count of each receipt the way annexure page counts are
    held; a missing or unreadable entry counts as one page.
    """

    def __init__(self, **fields) -> None:
        for attr, _camel, default in SCALAR_FIELDS:
            value = fields.pop(attr, default)
            setattr(self, attr, default if value is None else value)
        for attr, _camel in FLAG_FIELDS:
            setattr(self, attr, bool(fields.pop(attr, False)))
        for attr, _camel, _cls in ENTITY_FIELDS:
            setattr(self, attr, list(fields.pop(attr, None) or []))
        self.proof_of_service_uploads = list(fields.pop("proof_of_service_uploads", None) or [])
        self.proof_of_service_page_counts = list(fields.pop("proof_of_service_page_counts", None) or [])
        if fields:
            raise ValueError(f"Unknown form fields: {', '.join(sorted(fields))}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WritFormData":
        if not isinstance(data, dict):
            raise ValueError("Form data must be a JSON object.")
        fields = {}
        for attr, camel, default in SCALAR_FIELDS:
            fields[attr] = _pick(data, attr, camel, default)
        for attr, camel in FLAG_FIELDS:
            fields[attr] = bool(_pick(data, attr, camel, False))
        for attr, camel, entity_cls in ENTITY_FIELDS:
            fields[attr] = _entities(data, attr, camel, entity_cls)
        fields["proof_of_service_uploads"] = _text_list(
            _pick(data, "proof_of_service_uploads", "proofOfServiceUploads"),
            "proof_of_service_uploads",
        )
        counts = _pick(data, "proof_of_service_page_counts", "proofOfServicePageCounts")
        if counts is not None and not isinstance(counts, list):
            raise ValueError("proof_of_service_page_counts must be a list.")
        fields["proof_of_service_page_counts"] = counts or []
        return cls(**fields)

    def validate(self) -> List[str]:
        """Problems that must be fixed before the bundle is filed."""
        problems = []
        if not self.petitioners:
            problems.append("At least one petitioner is required.")
        if not self.respondents:
            problems.append("At least one respondent is required.")
        if not self.advocates:
            problems.append("At least one advocate is required.")
        if any(not p.name for p in self.petitioners):
            problems.append("One or more petitioners are missing names.")
        if any(not r.name for r in self.respondents):
            problems.append("One or more respondents are missing names.")
        if any(not a.name for a in self.advocates):
            problems.append("One or more advocates are missing names.")
        if self.petition_type not in ("Civil", "Criminal"):
            problems.append(f"Unknown petition type: {self.petition_type!r}.")
        return problems
