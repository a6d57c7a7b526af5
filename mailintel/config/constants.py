"""
Constants used across the parser.
Versioned and pinned for determinism.
"""
from typing import Dict, List, Set

# =============================================================================
# Versions
# =============================================================================
PARSER_VERSION: str = "mailintel-parser-1.0.0"
EXTRACTOR_VERSION: str = "entity-patterns-2026.1"
SIGNATURE_RULES_VERSION: str = "signature-rules-1.0"
SPAM_RULES_VERSION: str = "spam-rules-1.0"
SCHEMA_VERSION: str = "email-record-v1"

# =============================================================================
# Subject prefixes (reply / forward, incl. common localized variants)
# =============================================================================
REPLY_PREFIXES: Set[str] = {"re", "aw", "sv", "antw", "vs"}
FORWARD_PREFIXES: Set[str] = {"fwd", "fw", "wg", "tr", "rv"}

# =============================================================================
# Sender classification
# =============================================================================
NOREPLY_MARKERS: List[str] = [
    "noreply", "no-reply", "no_reply", "donotreply", "do-not-reply",
    "automated", "mailer-daemon", "postmaster", "bounce",
]

FREEMAIL_DOMAINS: Set[str] = {
    "gmail.com", "googlemail.com", "yahoo.com", "outlook.com", "hotmail.com",
    "live.com", "protonmail.com", "proton.me", "icloud.com", "aol.com",
    "gmx.com", "mail.com", "yandex.com",
}

# =============================================================================
# Signature detection
# =============================================================================
SIGNATURE_DELIMITERS: Set[str] = {"--", "-- "}

SIGN_OFF_TOKENS: List[str] = [
    "best regards", "kind regards", "warm regards", "warmest regards",
    "regards", "best wishes", "best", "all the best", "sincerely",
    "sincerely yours", "yours sincerely", "yours truly", "respectfully",
    "thanks", "thank you", "many thanks", "thanks again", "cheers",
    "talk soon", "take care",
]

SENT_FROM_PREFIX: str = "sent from my"

# =============================================================================
# Entity heuristics
# =============================================================================
GREETING_TOKENS: List[str] = [
    "hi", "hello", "hey", "dear", "good morning", "good afternoon",
    "good evening",
]

INTRODUCTION_PHRASES: List[str] = [
    "my name is", "this is", "i am", "i'm",
]

# Capitalized words that look like names but are not.
NAME_STOPWORDS: Set[str] = {
    "all", "everyone", "team", "there", "sir", "madam", "customer", "support",
    "friend", "friends", "folks", "guys", "colleagues", "sales", "admin",
    "the", "a", "an", "and", "or", "thanks", "thank", "regards", "best",
    "sincerely", "cheers", "dear", "hello", "hi", "hey", "mr", "mrs", "ms",
    "dr", "i", "we", "you", "inc", "llc", "ltd", "corp", "sent",
}

# Leading capitalized words stripped from company candidates.
COMPANY_LEADING_STOPWORDS: Set[str] = {
    "the", "at", "from", "thanks", "thank", "hi", "hello", "dear", "with",
    "for", "and", "of", "by", "to", "in", "on", "visit", "contact", "call",
    "email", "regards", "best", "sincerely", "cheers", "our", "your", "my",
    "we", "i", "please", "join", "welcome",
}

CORPORATE_SUFFIXES: List[str] = [
    "Inc.", "Inc", "Incorporated", "LLC", "L.L.C.", "Ltd.", "Ltd", "Limited",
    "Corp.", "Corp", "Corporation", "GmbH", "PLC", "plc", "LLP", "AG",
    "S.A.", "S.p.A.", "SpA", "Co.", "B.V.", "N.V.", "Pty Ltd",
]

# =============================================================================
# Monetary amounts
# =============================================================================
CURRENCY_SYMBOLS: Dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₹": "INR",
}

CURRENCY_CODES: Set[str] = {
    "USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CHF", "INR", "CNY", "NZD",
    "SEK", "NOK", "DKK",
}

# =============================================================================
# Phone numbers
# =============================================================================
PHONE_MIN_DIGITS: int = 7
PHONE_MAX_DIGITS: int = 15
TOLL_FREE_PREFIXES: List[str] = ["800", "888", "877", "866", "855", "844", "833"]

# =============================================================================
# URLs
# =============================================================================
TRACKING_URL_MARKERS: List[str] = [
    "track", "click", "redirect", "utm_", "mc_eid", "trk",
]

UNSUBSCRIBE_URL_MARKERS: List[str] = ["unsubscribe", "optout", "opt-out"]

SOCIAL_DOMAINS: List[str] = [
    "linkedin.com", "twitter.com", "facebook.com", "instagram.com", "x.com",
    "github.com", "youtube.com",
]

DOCUMENT_EXTENSIONS: List[str] = [".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx"]

# =============================================================================
# Spam keyword dictionaries
# =============================================================================
URGENCY_LURE_TERMS: List[str] = [
    "act now", "urgent", "immediately", "limited time", "expires today",
    "final notice", "last chance", "action required", "verify your account",
    "account suspended", "respond now", "don't miss",
]

FINANCIAL_LURE_TERMS: List[str] = [
    "wire transfer", "lottery", "you have won", "winner", "claim your prize",
    "inheritance", "bitcoin", "crypto investment", "guaranteed income",
    "risk-free", "free money", "cash bonus", "bank details", "beneficiary",
    "million dollars", "gift card",
]

# =============================================================================
# Urgency (message priority) dictionaries
# =============================================================================
URGENT_TERMS: List[str] = [
    "urgent", "asap", "emergency", "critical", "immediately", "outage",
    "down", "blocker",
]

HIGH_TERMS: List[str] = [
    "important", "priority", "time-sensitive", "deadline", "escalate",
]

DEADLINE_PATTERNS: List[str] = [
    r"\bby (?:end of day|eod|tomorrow|tonight|monday|tuesday|wednesday|thursday|friday)\b",
    r"\bwithin \d{1,2} (?:hours?|days?)\b",
    r"\bdue (?:on|by) \w+",
]

# =============================================================================
# Sentiment hints
# =============================================================================
POSITIVE_TERMS: List[str] = [
    "thank", "appreciate", "great", "excellent", "pleased", "happy",
    "wonderful", "glad",
]

NEGATIVE_TERMS: List[str] = [
    "complaint", "frustrated", "disappointed", "problem", "unacceptable",
    "angry", "refund", "broken",
]
