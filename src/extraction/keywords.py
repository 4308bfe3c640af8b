"""
Language keyword lists used to classify free-text blocks in result cards.

Search results are served in English or Spanish depending on the account
locale, so each list covers both.
"""

import re

# Words that mark a block as a job title / headline
ROLE_KEYWORDS = (
    # English
    "manager", "director", "head", "lead", "chief", "officer", "president",
    "vp", "vice president", "engineer", "developer", "analyst", "consultant",
    "specialist", "coordinator", "executive", "associate", "supervisor",
    "architect", "designer", "recruiter", "founder", "co-founder", "owner",
    "partner", "intern", "assistant", "administrator", "scientist",
    "ceo", "cto", "cfo", "coo", "cmo", "hr", "marketing", "sales",
    # Spanish
    "gerente", "director", "directora", "jefe", "jefa", "líder", "lider",
    "coordinador", "coordinadora", "analista", "ingeniero", "ingeniera",
    "desarrollador", "desarrolladora", "consultor", "consultora",
    "especialista", "ejecutivo", "ejecutiva", "asistente", "supervisor",
    "supervisora", "fundador", "fundadora", "socio", "socia", "becario",
    "practicante", "responsable", "encargado", "encargada",
)

# Place names commonly seen in result cards
LOCATION_KEYWORDS = (
    "Ciudad de México", "CDMX", "México", "Mexico", "Mexico City", "Monterrey",
    "Guadalajara", "Querétaro", "Puebla", "Argentina", "Buenos Aires",
    "Colombia", "Bogotá", "Medellín", "España", "Spain", "Madrid",
    "Barcelona", "Perú", "Peru", "Lima", "Chile", "Santiago",
    "United States", "Estados Unidos",
)

# Area qualifiers ("Greater Madrid Metropolitan Area", "Área metropolitana de Lima")
LOCATION_QUALIFIERS = re.compile(
    r"\b(?:area|área|metropolitan|metropolitana|greater|region|región|province|provincia)\b",
    re.I,
)

# "2nd", "• 3rd+", "1st degree connection", "Contacto de 2.º grado", "2º"
CONNECTION_DEGREE_RE = re.compile(
    r"^(?:[•·]\s*)?(?:"
    r"(?:1st|2nd|3rd\+?)(?:\s+degree(?:\s+connection)?)?"
    r"|(?:1er|2\.?º|3er\+?|3\.?º\+?)(?:\s+grado)?"
    r"|(?:contacto|conexión) de (?:1er|2\.?º|3er|3\.?º)\+? grado"
    r")$",
    re.I,
)

# Button / action labels inside a card
ACTION_LABELS = {
    "connect", "message", "follow", "following", "pending", "view profile",
    "conectar", "enviar mensaje", "mensaje", "seguir", "siguiendo", "pendiente",
    "ver perfil",
}

# Blocks that describe the network rather than the person
NOISE_RE = re.compile(
    r"(?:\bfollowers?\b|\bseguidores?\b|\bconnections?\b|\bconexi[oó]n(?:es)?\b"
    r"|\bmutual\b|\ben común\b|\bshared\b|\bview .+ profile\b|\bver el perfil\b"
    r"|\bstatus is\b|\bestado:\s)",
    re.I,
)

# "Past: X at Y" / "Anterior: X en Y" describe old roles
PAST_PREFIX_RE = re.compile(r"^(?:past|anterior|previous)\s*:\s*", re.I)

# "Current: X at Y" / "Actual: X en Y"
CURRENT_PREFIX_RE = re.compile(r"^(?:current|actual|actualmente)\s*:\s*", re.I)

# Separators between role and employer in a headline ("X at Y", "X en Y", "X @ Y")
EMPLOYER_SEPARATOR_RE = re.compile(r"\s+(?:at|en)\s+|\s*@\s*", re.I)

# Headlines often chain several claims: "CMO at Acme | Speaker | Ex-Google"
HEADLINE_SEGMENT_RE = re.compile(r"\s+[|·]\s+")

# Names the site shows instead of a hidden member's name
REDACTED_NAME_RE = re.compile(r"^(?:linkedin member|miembro de linkedin)$", re.I)

# Trailing "• 2nd" after a name
NAME_SUFFIX_RE = re.compile(r"\s*[•·].*$")
