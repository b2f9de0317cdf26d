"""
Certificate Text Content

Per-language strings for the certificate. Every language provides the same
keys so the layout is identical and only the text changes.
"""

from dataclasses import dataclass

from volugram.core.languages import Language, resolve_language


@dataclass(frozen=True)
class CertificateContent:
    certificate_text: str
    certificate_title: str
    # Placeholders: full_name, position, hours, minutes, event_title,
    # location, start_date, end_date
    volunteer_details: str
    user_evaluation_title: str
    team_leader_evaluation_title: str
    category: str
    rating: str
    overall_rating: str

    def narrative(self, **fields: object) -> str:
        return self.volunteer_details.format(**fields)


CERTIFICATE_CONTENT: dict[Language, CertificateContent] = {
    Language.EN: CertificateContent(
        certificate_text="Certificate",
        certificate_title="Certificate of Volunteer Work",
        volunteer_details=(
            "To certify that {full_name}, a {position}, volunteered for {hours} hours and "
            "{minutes} minutes. Participated in {event_title} held at {location}, "
            "from {start_date} to {end_date}."
        ),
        user_evaluation_title="Volunteer Self-Evaluation",
        team_leader_evaluation_title="Team Leader Evaluation",
        category="Category",
        rating="Rating",
        overall_rating="Overall rating",
    ),
    Language.DE: CertificateContent(
        certificate_text="Zertifikat",
        certificate_title="Zertifikat der ehrenamtlichen Arbeit",
        volunteer_details=(
            "Um zu bescheinigen, dass {full_name}, ein/e {position}, für {hours} Stunden und "
            "{minutes} Minuten ehrenamtlich gearbeitet hat. Teilnahme an {event_title} in "
            "{location}, vom {start_date} bis {end_date}."
        ),
        user_evaluation_title="Ehrenamtliche Selbstbewertung",
        team_leader_evaluation_title="Bewertung durch den Teamleiter",
        category="Kategorie",
        rating="Bewertung",
        overall_rating="Gesamtbewertung",
    ),
    Language.ET: CertificateContent(
        certificate_text="Tunnistus",
        certificate_title="Vabatahtliku töö tunnistus",
        volunteer_details=(
            "Sertifitseeritakse, et {full_name}, {position}, osales vabatahtlikuna {hours} "
            "tundi ja {minutes} minutit. Osalesid {event_title} asukohas {location}, "
            "ajavahemikul {start_date} kuni {end_date}."
        ),
        user_evaluation_title="Vabatahtliku Enesehinnang",
        team_leader_evaluation_title="Juhi hinnang",
        category="Kategooria",
        rating="Hinne",
        overall_rating="Üldine hinnang",
    ),
    Language.NO: CertificateContent(
        certificate_text="Sertifikat",
        certificate_title="Frivillighetsbevis",
        volunteer_details=(
            "For å bekrefte at {full_name}, en {position}, deltok frivillig i {hours} timer og "
            "{minutes} minutter. Deltok i {event_title} arrangert på {location}, "
            "fra {start_date} til {end_date}."
        ),
        user_evaluation_title="Frivillig Selvvurdering",
        team_leader_evaluation_title="Leder Vurdering",
        category="Kategori",
        rating="Vurdering",
        overall_rating="Samlet vurdering",
    ),
}


def get_content(language: Language | str) -> CertificateContent:
    """Content table for a language; raises UnsupportedLocaleError if unknown."""
    return CERTIFICATE_CONTENT[resolve_language(language)]
