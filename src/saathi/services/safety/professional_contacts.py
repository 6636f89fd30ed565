"""
Professional Contact Directory

Jurisdiction-aware directory of emergency services and crisis
helplines used to populate CrisisEvents.

Contacts inside a jurisdiction are listed in severity order: the most
reliable round-the-clock crisis lines first. The built-in tables can
be extended or replaced with a JSON file.

LEGAL_REVIEW_REQUIRED: Every number must be verified for accuracy in
its jurisdiction before production use.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Optional

from saathi.config.logging_config import get_logger
from saathi.domain.enums import RiskLevel
from saathi.domain.models import ProfessionalContact

logger = get_logger(__name__)


@dataclass
class JurisdictionContacts:
    """
    Contacts for one jurisdiction.

    Attributes:
        country_code: ISO country code
        country_name: Human-readable country name
        emergency_number: General emergency number
        contacts: Crisis lines ordered by severity
    """

    country_code: str
    country_name: str
    emergency_number: str = ""
    contacts: list[ProfessionalContact] = field(default_factory=list)

    @property
    def emergency_contact(self) -> Optional[ProfessionalContact]:
        if not self.emergency_number:
            return None
        return ProfessionalContact(
            name="Emergency Services",
            contact=self.emergency_number,
            kind="emergency",
            description=f"{self.country_name} emergency number",
            available_24_7=True,
        )


class ProfessionalContactDirectory:
    """
    Static, severity-ordered contact directory.

    Selection per level:
    - severe: emergency services first, then every crisis line
    - high: the top 3 crisis lines
    - moderate: the top 2 crisis lines

    Usage:
        directory = ProfessionalContactDirectory()
        contacts = directory.contacts_for(RiskLevel.SEVERE, "IN")
    """

    DEFAULT_CONTACTS: JurisdictionContacts = JurisdictionContacts(
        country_code="INTL",
        country_name="International",
        contacts=[
            ProfessionalContact(
                name="Befrienders Worldwide",
                contact="https://www.befrienders.org/",
                kind="website",
                description="Emotional support centres globally",
                available_24_7=True,
            ),
            ProfessionalContact(
                name="International Association for Suicide Prevention",
                contact="https://www.iasp.info/resources/Crisis_Centres/",
                kind="website",
                description="Directory of crisis centres worldwide",
                available_24_7=True,
            ),
        ],
    )

    BUILT_IN_CONTACTS: dict[str, JurisdictionContacts] = {
        "IN": JurisdictionContacts(
            country_code="IN",
            country_name="India",
            emergency_number="112",
            contacts=[
                ProfessionalContact(
                    name="Vandrevala Foundation",
                    contact="9999 666 555",
                    description="Mental health crisis support",
                    available_24_7=True,
                    languages=("en", "hi"),
                ),
                ProfessionalContact(
                    name="AASRA",
                    contact="91-22-27546669",
                    description="Suicide prevention",
                    available_24_7=True,
                    languages=("en", "hi"),
                ),
                ProfessionalContact(
                    name="Sneha Foundation",
                    contact="044-24640050",
                    description="Emotional support",
                    available_24_7=True,
                    languages=("en", "ta"),
                ),
                ProfessionalContact(
                    name="iCall",
                    contact="9152987821",
                    description="Psychosocial counselling (Mon-Sat, 8AM-10PM)",
                    available_24_7=False,
                    languages=("en", "hi"),
                ),
                ProfessionalContact(
                    name="Sumaitri",
                    contact="011-23389090",
                    description="Emotional support (afternoons and evenings)",
                    available_24_7=False,
                    languages=("en", "hi"),
                ),
            ],
        ),
        "US": JurisdictionContacts(
            country_code="US",
            country_name="United States",
            emergency_number="911",
            contacts=[
                ProfessionalContact(
                    name="988 Suicide & Crisis Lifeline",
                    contact="988",
                    description="National suicide prevention lifeline",
                    available_24_7=True,
                    languages=("en", "es"),
                ),
                ProfessionalContact(
                    name="Crisis Text Line",
                    contact="Text HOME to 741741",
                    kind="text_line",
                    description="Text-based crisis support",
                    available_24_7=True,
                ),
            ],
        ),
        "GB": JurisdictionContacts(
            country_code="GB",
            country_name="United Kingdom",
            emergency_number="999",
            contacts=[
                ProfessionalContact(
                    name="Samaritans",
                    contact="116 123",
                    description="Emotional support for anyone in distress",
                    available_24_7=True,
                ),
                ProfessionalContact(
                    name="SHOUT",
                    contact="Text SHOUT to 85258",
                    kind="text_line",
                    description="Text-based mental health support",
                    available_24_7=True,
                ),
            ],
        ),
    }

    # Number of crisis lines surfaced per level (None = all)
    LEVEL_LIMITS: dict[RiskLevel, Optional[int]] = {
        RiskLevel.SEVERE: None,
        RiskLevel.HIGH: 3,
        RiskLevel.MODERATE: 2,
    }

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize directory.

        Args:
            config_path: Optional path to JSON override file
        """
        self._jurisdictions = dict(self.BUILT_IN_CONTACTS)

        if config_path:
            if not os.path.exists(config_path):
                raise FileNotFoundError(f"Contact directory not found: {config_path}")
            self._load_config(config_path)

    def _load_config(self, config_path: str) -> None:
        """Load jurisdictions from a JSON file, replacing built-ins per country."""
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for country_code, country_data in data.items():
            contacts = []
            for raw in country_data.get("contacts", []):
                raw = dict(raw)
                raw["languages"] = tuple(raw.get("languages", ("en",)))
                contacts.append(ProfessionalContact(**raw))
            self._jurisdictions[country_code.upper()] = JurisdictionContacts(
                country_code=country_code.upper(),
                country_name=country_data.get("country_name", country_code),
                emergency_number=country_data.get("emergency_number", ""),
                contacts=contacts,
            )

        logger.info(
            "Loaded contact directory config",
            path=config_path,
            jurisdiction_count=len(data),
        )

    def get_jurisdiction(self, country_code: str) -> JurisdictionContacts:
        """Resolve a jurisdiction, falling back to international contacts."""
        code = (country_code or "").upper()
        if code in self._jurisdictions:
            return self._jurisdictions[code]

        logger.warning("No contacts for jurisdiction, using default", country_code=country_code)
        return self.DEFAULT_CONTACTS

    def contacts_for(self, level: RiskLevel, country_code: str) -> tuple[ProfessionalContact, ...]:
        """
        Contacts to attach to a crisis event.

        Args:
            level: Risk level that triggered escalation
            country_code: User's jurisdiction

        Returns:
            Contacts ordered by severity; empty below moderate
        """
        if level not in self.LEVEL_LIMITS:
            return ()

        jurisdiction = self.get_jurisdiction(country_code)
        limit = self.LEVEL_LIMITS[level]
        lines = jurisdiction.contacts if limit is None else jurisdiction.contacts[:limit]

        selected: list[ProfessionalContact] = []
        if level == RiskLevel.SEVERE and jurisdiction.emergency_contact:
            selected.append(jurisdiction.emergency_contact)
        selected.extend(lines)
        return tuple(selected)

    def list_supported_countries(self) -> list[str]:
        return sorted(self._jurisdictions)
