"""Built-in schema.org type/property catalogue for Direct-mode prompts.

Hosts that keep their own reference text can supply any object implementing
``SchemaReferenceProtocol``; this module is the default.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jsonldgen.models.payload import validate_type_hint


@dataclass(frozen=True)
class PropertyDef:
    name: str
    description: str
    recommended: bool = False
    type: str = ""


@dataclass(frozen=True)
class TypeDef:
    description: str
    properties: tuple[PropertyDef, ...]
    nested: dict[str, tuple[PropertyDef, ...]] = field(default_factory=dict)


def _p(name: str, description: str, rec: bool = False, type_: str = "") -> PropertyDef:
    return PropertyDef(name, description, rec, type_)


DEFINITIONS: dict[str, TypeDef] = {
    "Organization": TypeDef(
        "An organization such as a company, NGO, club, or institution.",
        (
            _p("name", "Organization name", True),
            _p("url", "Website URL", True),
            _p("logo", "Logo image URL", True, "URL"),
            _p("description", "Brief description of the organization", True),
            _p("email", "Contact email address"),
            _p("telephone", "Phone number"),
            _p("address", "Physical address", type_="PostalAddress"),
            _p("sameAs", "Social media profile URLs", type_="Array of URLs"),
            _p("contactPoint", "Contact information", type_="ContactPoint"),
            _p("foundingDate", "Date organization was founded", type_="Date"),
            _p("founder", "Founder(s)", type_="Person"),
            _p("areaServed", "Geographic area served"),
            _p("slogan", "Organization slogan or tagline"),
        ),
    ),
    "LocalBusiness": TypeDef(
        "A local business with a physical location. Prefer specific subtypes when obvious.",
        (
            _p("name", "Business name", True),
            _p("url", "Website URL", True),
            _p("image", "Business photos", True, "URL"),
            _p("address", "Physical address", True, "PostalAddress"),
            _p("telephone", "Phone number", True),
            _p("email", "Email address"),
            _p("description", "Business description"),
            _p("openingHours", 'Opening hours (e.g., "Mo-Fr 09:00-17:00")'),
            _p("priceRange", 'Price range (e.g., "$$$")'),
            _p("geo", "Geographic coordinates", type_="GeoCoordinates"),
            _p("areaServed", "Service area"),
            _p("aggregateRating", "Average rating", type_="AggregateRating"),
            _p("review", "Customer reviews", type_="Review"),
        ),
    ),
    "Service": TypeDef(
        "A service provided by an organization or person.",
        (
            _p("name", "Service name", True),
            _p("description", "Service description", True),
            _p("provider", "Who provides this service", True, "Organization or Person"),
            _p("serviceType", "Type/category of service"),
            _p("areaServed", "Geographic area where available"),
            _p("audience", "Target audience"),
            _p("offers", "Pricing information", type_="Offer"),
            _p("review", "Service reviews", type_="Review"),
        ),
    ),
    "Product": TypeDef(
        "A product offered for sale.",
        (
            _p("name", "Product name", True),
            _p("description", "Product description", True),
            _p("image", "Product images", True, "URL"),
            _p("offers", "Pricing and availability", True, "Offer"),
            _p("brand", "Product brand", type_="Brand"),
            _p("sku", "Stock keeping unit"),
            _p("category", "Product category"),
            _p("aggregateRating", "Average rating", type_="AggregateRating"),
            _p("review", "Product reviews", type_="Review"),
        ),
    ),
    "Person": TypeDef(
        "A person - team member, founder, author, etc.",
        (
            _p("name", "Full name", True),
            _p("jobTitle", "Job title or role", True),
            _p("url", "Personal website or profile URL"),
            _p("image", "Photo", type_="URL"),
            _p("description", "Bio or description"),
            _p("worksFor", "Employer organization", type_="Organization"),
            _p("sameAs", "Social media profiles", type_="Array of URLs"),
        ),
    ),
    "Event": TypeDef(
        "An event happening at a specific time and location.",
        (
            _p("name", "Event name", True),
            _p("startDate", "Start date/time", True, "DateTime"),
            _p("location", "Event location", True, "Place or VirtualLocation"),
            _p("description", "Event description"),
            _p("endDate", "End date/time", type_="DateTime"),
            _p("organizer", "Event organizer", type_="Organization or Person"),
            _p("offers", "Ticket information", type_="Offer"),
            _p("eventStatus", "EventScheduled, EventCancelled, etc."),
            _p("eventAttendanceMode", "Offline, Online or Mixed attendance mode"),
        ),
    ),
    "FAQPage": TypeDef(
        "A page with FAQ content. Use ONLY when the page has clear Q&A pairs.",
        (_p("mainEntity", "Array of Question objects", True, "Array of Question"),),
        nested={
            "Question": (
                _p("name", "The question text", True),
                _p("acceptedAnswer", "Answer object", True, "Answer"),
            ),
            "Answer": (_p("text", "The answer text", True),),
        },
    ),
    "Article": TypeDef(
        "An article, blog post, or news article.",
        (
            _p("headline", "Article headline (max 110 chars)", True),
            _p("datePublished", "Publication date", True, "DateTime"),
            _p("dateModified", "Last modified date", type_="DateTime"),
            _p("author", "Article author", True, "Person or Organization"),
            _p("publisher", "Publisher", True, "Organization"),
            _p("image", "Article image", True, "URL"),
            _p("description", "Article summary"),
            _p("keywords", "Article keywords"),
            _p("articleSection", "Section/category"),
        ),
    ),
    "WebPage": TypeDef(
        "A web page. Often used in @graph with other types.",
        (
            _p("name", "Page title", True),
            _p("url", "Page URL", True),
            _p("description", "Page description"),
            _p("isPartOf", "Parent website", type_="WebSite"),
            _p("datePublished", "Publication date", type_="Date"),
            _p("dateModified", "Last modified date", type_="Date"),
            _p("breadcrumb", "Breadcrumb navigation", type_="BreadcrumbList"),
            _p("mainEntity", "Main subject of the page", type_="Thing"),
        ),
    ),
    "HowTo": TypeDef(
        "Instructions for accomplishing a task.",
        (
            _p("name", "Title of the how-to", True),
            _p("step", "Steps to complete", True, "Array of HowToStep"),
            _p("description", "Description of the task"),
            _p("totalTime", "Total time required", type_="Duration"),
            _p("supply", "Supplies needed", type_="HowToSupply"),
            _p("tool", "Tools needed", type_="HowToTool"),
        ),
        nested={
            "HowToStep": (
                _p("name", "Step name/title"),
                _p("text", "Step instructions", True),
            ),
        },
    ),
    "ContactPoint": TypeDef(
        "Contact information for an organization or person.",
        (
            _p("contactType", "customer service, sales, technical support, etc.", True),
            _p("telephone", "Phone number"),
            _p("email", "Email address"),
            _p("areaServed", "Geographic area served"),
            _p("availableLanguage", "Languages available"),
        ),
    ),
    "PostalAddress": TypeDef(
        "A physical mailing address.",
        (
            _p("streetAddress", "Street address", True),
            _p("addressLocality", "City", True),
            _p("addressRegion", "State/Province"),
            _p("postalCode", "ZIP/Postal code"),
            _p("addressCountry", "Country"),
        ),
    ),
    "Offer": TypeDef(
        "An offer for a product or service.",
        (
            _p("price", "Price amount", True),
            _p("priceCurrency", "Currency code (USD, EUR, etc.)", True),
            _p("availability", "InStock, OutOfStock, PreOrder, etc."),
            _p("url", "URL to purchase"),
            _p("validFrom", "Offer start date", type_="DateTime"),
        ),
    ),
    "Review": TypeDef(
        "A review of an item (product, service, business).",
        (
            _p("reviewRating", "Rating given", True, "Rating"),
            _p("author", "Review author", True, "Person"),
            _p("reviewBody", "Review text"),
            _p("datePublished", "Review date", type_="Date"),
        ),
        nested={
            "Rating": (
                _p("ratingValue", "Rating value (e.g., 4.5)", True),
                _p("bestRating", "Maximum rating (e.g., 5)"),
            ),
        },
    ),
}

# Preferred type → the families worth describing alongside it
TYPE_FAMILIES: dict[str, tuple[str, ...]] = {
    "auto": (
        "WebPage", "Organization", "Service", "LocalBusiness",
        "FAQPage", "Article", "ContactPoint", "PostalAddress",
    ),
    "Organization": ("Organization", "ContactPoint", "PostalAddress", "Person"),
    "LocalBusiness": ("LocalBusiness", "ContactPoint", "PostalAddress", "Offer", "Review", "Service"),
    "Service": ("Service", "Offer", "Organization", "ContactPoint", "Review"),
    "Product": ("Product", "Offer", "Review", "Organization"),
    "Person": ("Person", "ContactPoint", "PostalAddress", "Organization"),
    "Event": ("Event", "Offer", "Organization", "PostalAddress", "Person"),
    "FAQPage": ("FAQPage", "WebPage", "Organization"),
    "Article": ("Article", "Organization", "Person", "WebPage"),
    "WebPage": ("WebPage", "Organization", "ContactPoint"),
    "HowTo": ("HowTo", "WebPage", "Organization"),
}


def relevant_types(type_hint: str) -> tuple[str, ...]:
    return TYPE_FAMILIES[validate_type_hint(type_hint)]


def format_for_prompt(types: tuple[str, ...]) -> str:
    """Render the catalogue entries for ``types`` as prompt text."""
    lines = [
        "=== SCHEMA.ORG PROPERTY REFERENCE ===",
        "Use these properties to create COMPREHENSIVE schemas. "
        "Include all applicable properties.",
        "",
    ]
    for type_name in types:
        definition = DEFINITIONS.get(type_name)
        if definition is None:
            continue
        lines.append(f"--- {type_name} ---")
        lines.append(definition.description)
        lines.append("Properties:")
        for prop in definition.properties:
            marker = "[REC] " if prop.recommended else "      "
            suffix = f" (Type: {prop.type})" if prop.type else ""
            lines.append(f"{marker}{prop.name}: {prop.description}{suffix}")
        for nested_type, nested_props in definition.nested.items():
            lines.append(f"  Nested {nested_type}:")
            lines.extend(f"    - {prop.name}: {prop.description}" for prop in nested_props)
        lines.append("")
    lines.append("[REC] = Recommended property - include when data is available")
    return "\n".join(lines)


class StaticSchemaReference:
    """Default ``SchemaReferenceProtocol`` backed by the built-in catalogue."""

    def for_type_hint(self, type_hint: str) -> str:
        return format_for_prompt(relevant_types(type_hint))
