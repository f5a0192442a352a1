from bulk_ingest.errors import UnknownRecordKind
from bulk_ingest.schemas import (
    BOOLEAN,
    DELIMITED_LIST,
    EMAIL,
    ENUM,
    NAME,
    NUMBER,
    PHONE,
    URL,
    FieldSpec,
    RecordSchema,
)


OFFER = "offer"
OFFER_REQUEST = "offer_request"
CONTACT = "contact"

PAYOUT_TYPES = ("CPA", "CPL", "CPI", "RevShare")
OFFER_STATUSES = ("active", "paused", "expired", "draft")
REQUEST_STATUSES = ("active", "paused", "draft")

# Generated contact numbers are not real; see synthesized_fields on the stored record.
PLACEHOLDER_PHONE = "+1-000-000-0000"
MAX_NAME_LENGTH = 50


OFFER_SCHEMA = RecordSchema(
    record_kind=OFFER,
    sample_key="sampleOffers",
    sample_fields=("title", "payout_type", "payout_value", "target_geo"),
    key_fields=("title", "landing_page_url"),
    fields=(
        FieldSpec(
            "title",
            "Title",
            required=True,
            min_length=3,
            synonyms=("offer_title", "name", "offer_name", "campaign_name", "campaign_title", "Offer Title"),
            example="Summer Sweepstakes",
        ),
        FieldSpec(
            "target_geo",
            "Target Geo",
            kind=DELIMITED_LIST,
            required=True,
            synonyms=("geo", "countries", "geography", "target_countries", "geos", "coverage"),
            example="US, CA, UK",
        ),
        FieldSpec(
            "payout_type",
            "Payout Type",
            kind=ENUM,
            required=True,
            allowed_values=PAYOUT_TYPES,
            synonyms=("commission_type", "model", "payment_model"),
            example="CPA",
        ),
        FieldSpec(
            "payout_value",
            "Payout Value",
            kind=NUMBER,
            required=True,
            positive=True,
            synonyms=("payout", "commission", "rate", "cpa", "cpl", "cpi"),
            example=25,
        ),
        FieldSpec(
            "landing_page_url",
            "Landing Page URL",
            kind=URL,
            required=True,
            synonyms=("landing_page", "url", "offer_url", "link"),
            example="https://example.com/offer",
        ),
        FieldSpec(
            "description",
            "Description",
            min_length=10,
            synonyms=("offer_description", "details", "campaign_details"),
            example="Lead capture for the summer campaign",
        ),
        FieldSpec(
            "category",
            "Category",
            synthesizable=True,
            placeholder="NA",
            synonyms=("vertical", "niche", "offer_category"),
            example="Sweepstakes",
        ),
        FieldSpec(
            "requirements",
            "Requirements",
            synonyms=("terms", "conditions", "restrictions"),
            example="No incentivized traffic",
        ),
        FieldSpec(
            "allowed_traffic_sources",
            "Allowed Traffic Sources",
            kind=DELIMITED_LIST,
            synonyms=("traffic_sources", "allowed_sources", "tchannels"),
            example="Email, Social",
        ),
        FieldSpec(
            "private_offer",
            "Private Offer",
            kind=BOOLEAN,
            synthesizable=True,
            placeholder=False,
            synonyms=("private", "exclusive"),
            example="no",
        ),
        FieldSpec(
            "offer_status",
            "Offer Status",
            kind=ENUM,
            allowed_values=OFFER_STATUSES,
            synthesizable=True,
            placeholder="draft",
            synonyms=("status", "state"),
            example="active",
        ),
    ),
)


OFFER_REQUEST_SCHEMA = RecordSchema(
    record_kind=OFFER_REQUEST,
    sample_key="sampleRequests",
    sample_fields=("title", "vertical", "traffic_volume"),
    key_fields=("title", "vertical"),
    fields=(
        FieldSpec(
            "title",
            "Title",
            required=True,
            min_length=3,
            synonyms=("request_title", "name", "request_name", "campaign_name"),
            example="Health & Wellness Offers",
        ),
        FieldSpec(
            "vertical",
            "Vertical",
            required=True,
            synonyms=("category", "niche", "industry", "sector"),
            example="Health",
        ),
        FieldSpec(
            "geos_targeting",
            "Geos Targeting",
            kind=DELIMITED_LIST,
            required=True,
            synonyms=("geo", "countries", "geography", "target_countries", "geos", "coverage"),
            example="US, CA, UK",
        ),
        FieldSpec(
            "traffic_type",
            "Traffic Type",
            kind=DELIMITED_LIST,
            required=True,
            synonyms=("traffic_sources", "sources", "channels"),
            example="Social Media, Search",
        ),
        FieldSpec(
            "traffic_volume",
            "Traffic Volume",
            kind=NUMBER,
            required=True,
            positive=True,
            integer=True,
            synonyms=("volume", "monthly_volume", "clicks", "impressions"),
            example=10000,
        ),
        FieldSpec(
            "platforms_used",
            "Platforms Used",
            kind=DELIMITED_LIST,
            required=True,
            synonyms=("platforms", "networks"),
            example="Facebook, Google",
        ),
        FieldSpec(
            "desired_payout_type",
            "Desired Payout Type",
            kind=ENUM,
            allowed_values=PAYOUT_TYPES,
            synthesizable=True,
            placeholder="CPA",
            synonyms=("payout_type", "commission_type", "model", "payment_model"),
            example="CPA",
        ),
        FieldSpec(
            "budget_range",
            "Budget Range",
            synonyms=("budget", "spend", "monthly_budget"),
            example="$1000-$5000",
        ),
        FieldSpec(
            "notes",
            "Notes",
            synonyms=("description", "details", "comments", "additional_info"),
            example="Looking for high-converting health offers",
        ),
        FieldSpec(
            "request_status",
            "Request Status",
            kind=ENUM,
            allowed_values=REQUEST_STATUSES,
            synthesizable=True,
            placeholder="active",
            synonyms=("status", "state"),
            example="active",
        ),
    ),
)


CONTACT_SCHEMA = RecordSchema(
    record_kind=CONTACT,
    sample_key="sampleContacts",
    sample_fields=("company", "first_name", "last_name", "email"),
    key_fields=("company", "first_name", "last_name", "email"),
    swap_pairs=(("company", "email"),),
    require_any=(("first_name", "last_name"),),
    fields=(
        FieldSpec(
            "company",
            "Company name",
            required=True,
            min_length=2,
            reject_numeric=True,
            synonyms=("Company", "company_name"),
            example="Acme Media",
        ),
        FieldSpec(
            "first_name",
            "FirstName",
            kind=NAME,
            max_length=MAX_NAME_LENGTH,
            synonyms=("First Name", "first_name"),
            example="Ada",
        ),
        FieldSpec(
            "last_name",
            "Last Name",
            kind=NAME,
            max_length=MAX_NAME_LENGTH,
            synonyms=("LastName", "last_name"),
            example="Lovelace",
        ),
        FieldSpec("email", "Email Id", kind=EMAIL, synonyms=("Email", "email"), example="ada@acme.example"),
        FieldSpec("designation", "Designation", synonyms=("Title", "designation"), example="Partnerships Lead"),
        FieldSpec(
            "phone",
            "Phone",
            kind=PHONE,
            synthesizable=True,
            placeholder=PLACEHOLDER_PHONE,
            synonyms=("phone",),
            example="+1-415-555-0100",
        ),
    ),
)


_SCHEMAS = {
    OFFER: OFFER_SCHEMA,
    OFFER_REQUEST: OFFER_REQUEST_SCHEMA,
    CONTACT: CONTACT_SCHEMA,
}

_ALIASES = {
    "offers": OFFER,
    "offer_requests": OFFER_REQUEST,
    "offer-request": OFFER_REQUEST,
    "offer-requests": OFFER_REQUEST,
    "offerrequest": OFFER_REQUEST,
    "contacts": CONTACT,
}


def record_kinds() -> tuple[str, ...]:
    return tuple(_SCHEMAS)


def resolve_record_kind(record_kind: str) -> str:
    key = str(record_kind or "").strip().lower()
    key = _ALIASES.get(key, key)
    if key not in _SCHEMAS:
        allowed = ", ".join(record_kinds())
        raise UnknownRecordKind(f"Unknown record kind '{record_kind}'. Allowed: {allowed}.")
    return key


def schema_for(record_kind: str) -> RecordSchema:
    return _SCHEMAS[resolve_record_kind(record_kind)]
