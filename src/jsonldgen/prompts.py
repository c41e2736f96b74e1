"""Prompt assembly: payload construction and the two-message request.

Two mutually exclusive templates:

- Direct: the user message carries the full structured page content and the
  system prompt carries a schema.org reference catalogue plus a glossary of
  the structural markers produced by ``structurer``.
- Analyzed: the user message carries a pre-classified content object from an
  upstream analyzer; the system prompt is catalogue-free.

Both templates share the output contract (JSON only, ``@context``, the fixed
type vocabulary, no invented facts, ``@id`` linking). The user message is
assembled in a fixed order so identical payloads yield identical requests.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from jsonldgen.models.payload import (
    TYPE_HINTS,
    AnalyzedPayload,
    DirectPayload,
    Message,
    PageData,
    validate_type_hint,
)

if TYPE_CHECKING:
    from jsonldgen.config import BusinessSettings, GenerationSettings
    from jsonldgen.models.content import StructuredContent
    from jsonldgen.models.payload import PageMetadata, PromptPayload, SiteInfo

__all__ = [
    "SCHEMA_VOCABULARY",
    "TYPE_HINTS",
    "build_analyzed_payload",
    "build_business_data",
    "build_direct_payload",
    "build_messages",
    "validate_type_hint",
]

SCHEMA_VOCABULARY: tuple[str, ...] = (
    "Organization",
    "LocalBusiness",
    "Service",
    "Product",
    "Person",
    "Event",
    "FAQPage",
    "Article",
    "WebPage",
    "HowTo",
    "ContactPoint",
    "PostalAddress",
    "Offer",
    "Review",
)

_DAY_CODES = {
    "monday": "Mo",
    "tuesday": "Tu",
    "wednesday": "We",
    "thursday": "Th",
    "friday": "Fr",
    "saturday": "Sa",
    "sunday": "Su",
}

_OUTPUT_CONTRACT = f"""STRICT REQUIREMENTS:
1. Output ONLY valid JSON. No markdown code fences, no explanations, no commentary.
2. The output must be a single JSON object with "@context": "https://schema.org" at the root level.
3. Use ONLY these schema.org types: {", ".join(SCHEMA_VOCABULARY)}.
4. NEVER invent or hallucinate information. If a value is not present in the input, omit the field.
5. NEVER invent URLs, dates, email addresses, phone numbers or street addresses. Only use values explicitly provided in the input.

OUTPUT FORMAT:
Use @graph format to include multiple related entities:
{{"@context": "https://schema.org", "@graph": [...]}}

LINKING:
Define each entity once and reference it by @id fragment instead of duplicating it:
- "@id": "#organization" on the Organization or LocalBusiness
- "@id": "#webpage" on the main WebPage or Article
- "provider": {{"@id": "#organization"}} on every Service
- "publisher": {{"@id": "#organization"}} on Articles
- "worksFor": {{"@id": "#organization"}} on Person objects
- "itemReviewed": {{"@id": "#organization"}} on Reviews"""

_BUSINESS_PRIORITY = """BUSINESS DATA PRIORITY:
If BUSINESS DATA is provided in the input, it has been verified by the site owner. Use it as the authoritative source for the Organization/LocalBusiness name, description, logo, contact details, addresses (PostalAddress), opening hours, social profiles (sameAs) and founding date. It takes precedence over anything extracted from the page content.
For multiple locations, create one LocalBusiness or Place per location, each linked to the main Organization via @id."""

DIRECT_SYSTEM_PROMPT = f"""You are a schema.org JSON-LD generator that creates comprehensive, rich structured data for web pages.

YOUR GOAL: Generate detailed, complete schema markup that fully describes the page content, using every fact the content actually states.

{_OUTPUT_CONTRACT}

CONTENT STRUCTURE MARKERS:
The page content includes markers describing its structure:
- ## [Heading] ## marks a section heading
- [LIST START] / [LIST END] wrap a list; each item starts with "- "
- [NUMBERED LIST START] / [NUMBERED LIST END] wrap ordered steps
- [SECTION] / [/SECTION] wrap a content section
- [ARTICLE] / [/ARTICLE] wrap article content
- **text** marks important or emphasized text
- Links carry their URL in parentheses: text (https://...)
- [TESTIMONIAL START] / [TESTIMONIAL END] wrap a customer testimonial with Quote:, Author: and Rating: lines; create a Review for each one
- [QUOTE START] / [QUOTE END] wrap a quotation with Text: and Attribution: lines; treat it as a Review only when it is clearly customer feedback
- [FAQ ITEM START] / [FAQ ITEM END] wrap one Question: and Answer: pair; collect every FAQ item into a single FAQPage

Use these markers to identify services (often under "Services" or "What We Do"), contact details, team members, pricing, and question/answer pairs.

SCHEMA TYPE SELECTION:
- WebPage: default for informational pages
- Article: blog posts, news, editorial content with clear authorship
- Service: one Service per distinct service described
- LocalBusiness: business pages with a physical location
- Organization: company or organization information
- FAQPage: only for clear question/answer pairs
- Product: product pages with pricing
- HowTo: step-by-step instructions
- Event: announcements with dates

{_BUSINESS_PRIORITY}

Remember: completeness with accuracy. Include everything that IS present, nothing that is not."""

ANALYZED_SYSTEM_PROMPT = f"""You are a schema.org JSON-LD generator. You will receive PRE-ANALYZED content that has already been classified into structured sections.

YOUR TASK: Convert the analyzed content into comprehensive, valid schema.org JSON-LD markup.

{_OUTPUT_CONTRACT}

INPUT DATA STRUCTURE:
The "ANALYZED CONTENT" object may contain:
- page_type, page_summary: what the page is for
- organization: business or organization details
- services: services offered (one Service each, provider linked to #organization)
- testimonials: client reviews (one Review each, itemReviewed linked to #organization)
- faqs: question/answer pairs (one FAQPage with Question/Answer entries)
- team_members: people (one Person each, worksFor linked to #organization)
- contact_info: contact details (ContactPoint)
- products: products (one Product each, with Offer when priced)
- events: events (one Event each)
- how_to_steps: step-by-step instructions (HowTo with HowToStep entries)
- social_proof: statistics and credentials

Convert EVERY item in every array. Do not skip any testimonial, service, FAQ or team member.

{_BUSINESS_PRIORITY}"""

_DIRECTIVE = "Generate the JSON-LD now:"
_ANALYZED_DIRECTIVE = "Generate complete JSON-LD schema now. Include ALL analyzed items."


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=4, ensure_ascii=False)


def _type_hint_instruction(type_hint: str) -> str:
    if type_hint == "auto":
        return ""
    return (
        f"\nPREFERRED SCHEMA TYPE: {type_hint}\n"
        "Use this schema type if the content supports it. If the content clearly does not "
        "match this type, choose the most appropriate alternative."
    )


def _items_summary(analyzed: dict[str, Any]) -> str:
    counted = (
        ("testimonials", "testimonials (MUST create Review for each)"),
        ("services", "services"),
        ("faqs", "FAQ items"),
        ("team_members", "team members"),
        ("products", "products"),
    )
    found = [
        f"{len(analyzed[key])} {label}"
        for key, label in counted
        if isinstance(analyzed.get(key), list) and analyzed[key]
    ]
    if not found:
        return ""
    return "\n\nITEMS TO INCLUDE IN SCHEMA:\n- " + "\n- ".join(found)


def _direct_user_message(payload: DirectPayload) -> str:
    page = payload.page
    parts = [
        "Generate JSON-LD schema for the following page:",
        "",
        "PAGE DATA:",
        _to_json(page.to_wire()),
        "",
        "SITE DATA:",
        _to_json(payload.site.model_dump(mode="json")),
    ]
    if payload.business:
        parts += [
            "",
            "BUSINESS DATA (use this verified information for Organization/LocalBusiness schemas):",
            _to_json(payload.business),
        ]
    message = "\n".join(parts)

    if page.content_truncated:
        message += (
            f"\n[Content truncated: showing {len(page.content or '')} "
            f"of {page.original_length or 0} characters]"
        )
    message += _type_hint_instruction(payload.type_hint)
    message += f"\n\n{_DIRECTIVE}"
    return message


def _analyzed_user_message(payload: AnalyzedPayload) -> str:
    parts = [
        "Generate JSON-LD schema from the following pre-analyzed content:",
        "",
        "PAGE DATA:",
        _to_json(payload.page.to_wire()),
        "",
        "SITE DATA:",
        _to_json(payload.site.model_dump(mode="json")),
    ]
    if payload.business:
        parts += [
            "",
            "BUSINESS DATA (use this verified information for Organization/LocalBusiness schemas):",
            _to_json(payload.business),
        ]
    parts += [
        "",
        "ANALYZED CONTENT (pre-classified by content analyzer):",
        _to_json(payload.analyzed_content),
    ]
    message = "\n".join(parts)
    message += _type_hint_instruction(payload.type_hint)
    message += _items_summary(payload.analyzed_content)
    message += f"\n\n{_ANALYZED_DIRECTIVE}"
    return message


def build_messages(payload: PromptPayload) -> list[Message]:
    """Build the ``[system, user]`` message pair for a payload."""
    if isinstance(payload, AnalyzedPayload):
        system = ANALYZED_SYSTEM_PROMPT
        user = _analyzed_user_message(payload)
    else:
        system = DIRECT_SYSTEM_PROMPT
        if payload.schema_reference:
            system += (
                "\n\nSCHEMA.ORG REFERENCE:\nUse the following schema types and properties:\n\n"
                + payload.schema_reference
            )
        user = _direct_user_message(payload)

    return [Message(role="system", content=system), Message(role="user", content=user)]


# ---------------------------------------------------------------------------
# Payload construction
# ---------------------------------------------------------------------------


def build_business_data(business: BusinessSettings) -> dict[str, Any] | None:
    """Return owner-verified business facts, or ``None`` when none are configured.

    Empty fields are dropped so the model never sees blank values it might
    be tempted to fill in.
    """
    if not (business.name or business.email or business.phone or business.locations):
        return None

    data: dict[str, Any] = {
        "name": business.name,
        "description": business.description,
        "logo": business.logo,
        "email": business.email,
        "phone": business.phone,
        "foundingDate": business.founding_date,
    }

    same_as = [url for url in business.social_links.values() if url]
    if same_as:
        data["sameAs"] = same_as

    locations = []
    for location in business.locations:
        address = {
            "streetAddress": location.street,
            "addressLocality": location.city,
            "addressRegion": location.state,
            "postalCode": location.postal_code,
            "addressCountry": location.country,
        }
        hours = {
            _DAY_CODES[day.lower()]: time
            for day, time in location.hours.items()
            if time and day.lower() in _DAY_CODES
        }
        entry = {
            "name": location.name,
            "address": {key: value for key, value in address.items() if value},
            "telephone": location.phone,
            "email": location.email,
            "openingHours": hours,
        }
        entry = {key: value for key, value in entry.items() if value}
        if entry:
            locations.append(entry)
    if locations:
        data["locations"] = locations

    return {key: value for key, value in data.items() if value}


def build_direct_payload(
    page: PageMetadata,
    structured: StructuredContent,
    site: SiteInfo,
    settings: GenerationSettings,
    schema_reference: str,
) -> DirectPayload:
    return DirectPayload(
        page=PageData(
            title=page.title,
            url=page.url,
            page_type=page.page_type,
            content=structured.content,
            content_truncated=structured.truncated,
            original_length=structured.original_length,
            excerpt=page.excerpt or None,
            author=page.author,
            date_published=page.date_published,
            date_modified=page.modified_at or None,
            featured_image=page.featured_image,
            categories=page.categories,
            tags=page.tags,
        ),
        site=site,
        business=build_business_data(settings.business),
        type_hint=page.type_hint,
        schema_reference=schema_reference,
    )


def build_analyzed_payload(
    page: PageMetadata,
    analyzed_content: dict[str, Any],
    site: SiteInfo,
    settings: GenerationSettings,
) -> AnalyzedPayload:
    """Payload for pre-analyzed content: page metadata only, no body text."""
    return AnalyzedPayload(
        page=PageData(
            title=page.title,
            url=page.url,
            page_type=page.page_type,
            excerpt=page.excerpt or None,
            author=page.author,
            date_published=page.date_published,
            date_modified=page.modified_at or None,
            featured_image=page.featured_image,
        ),
        site=site,
        business=build_business_data(settings.business),
        type_hint=page.type_hint,
        analyzed_content=analyzed_content,
    )
