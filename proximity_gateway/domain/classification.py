"""
Business vs individual classification of destination accounts.

Only business accounts may be suggested to other users at a location, so a
person's receiving account is never broadcast to bystanders. The decision is
an ordered rule table: the first rule whose predicate matches gives the
verdict. Names matching no rule fall back to a policy default.

Keywords match anywhere in the upper-cased name by default, so fused names
like "SHOPRITE" or "GTBANK COLLECTIONS" count as businesses. The whole-word
table trades those for fewer false hits on personal names ("BANKOLE").
"""

import re
from typing import Callable, List, NamedTuple, Optional
from proximity_gateway.domain.models import AccountKind, DestinationAccount

BUSINESS_KEYWORDS = frozenset(
    {
        "STORE", "SHOP", "ENTERPRISE", "LTD", "LIMITED", "INC", "CORP", "CORPORATION",
        "BUSINESS", "COMPANY", "VENTURES", "TRADING", "SERVICES", "ENTERPRISES",
        "MART", "MARKET", "SUPERMARKET", "MALL", "PLAZA", "COMPLEX", "CENTER", "CENTRE",
        "RESTAURANT", "HOTEL", "CAFE", "BAR", "CLUB", "SALON", "SPA", "GYM",
        "PHARMACY", "HOSPITAL", "CLINIC", "SCHOOL", "UNIVERSITY", "COLLEGE",
        "BANK", "MICROFINANCE", "INSURANCE", "AGENCY", "BUREAU", "OFFICE",
        "STUDIO", "GALLERY", "THEATER", "CINEMA", "GAS", "PETROL", "STATION",
        "TRANSPORT", "LOGISTICS", "DELIVERY", "COURIER", "EXPRESS", "FAST",
        "QUICK", "SPEED", "RAPID", "SWIFT", "INSTANT", "IMMEDIATE",
        "GROUP", "HOLDINGS", "INTERNATIONAL", "GLOBAL", "WORLDWIDE",
    }
)

BUSINESS_PATTERNS = (
    re.compile(r"&\s*SONS\b"),
    re.compile(r"&\s*DAUGHTERS\b"),
    re.compile(r"&\s*CO\b"),
    re.compile(r"&\s*COMPANY\b"),
    re.compile(r"\bAND\s+SONS\b"),
    re.compile(r"\bNIG(ERIA)?\s+(LTD|LIMITED)\b"),
)

_TOKEN = re.compile(r"[A-Z0-9]+")


class ClassificationRule(NamedTuple):
    name: str
    predicate: Callable[[str], bool]
    verdict: AccountKind


def _tokens(name: str) -> List[str]:
    return _TOKEN.findall(name.upper())


def has_business_keyword(name: str) -> bool:
    """Any keyword anywhere in the name ("SHOPRITE IKEJA", "GTBANK COLLECTIONS")"""
    upper = name.upper()
    return any(keyword in upper for keyword in BUSINESS_KEYWORDS)


def has_business_keyword_word(name: str) -> bool:
    """Whole-word keyword match, allowing a plural "S" ("STORES", "SHOPS")"""
    for token in _tokens(name):
        if token in BUSINESS_KEYWORDS:
            return True
        if token.endswith("S") and token[:-1] in BUSINESS_KEYWORDS:
            return True
    return False


def matches_business_pattern(name: str) -> bool:
    upper = " ".join(name.upper().split())
    return any(pattern.search(upper) for pattern in BUSINESS_PATTERNS)


def looks_like_personal_name(name: str) -> bool:
    """2-4 words is the shape of "First Last" / "First Middle Last" names"""
    return 2 <= len(_tokens(name)) <= 4


def build_rules(whole_word_keywords: bool = False) -> List[ClassificationRule]:
    keyword_rule = has_business_keyword_word if whole_word_keywords else has_business_keyword
    return [
        ClassificationRule("business_keyword", keyword_rule, AccountKind.BUSINESS),
        ClassificationRule("business_pattern", matches_business_pattern, AccountKind.BUSINESS),
        ClassificationRule("personal_name_shape", looks_like_personal_name, AccountKind.INDIVIDUAL),
    ]


CLASSIFICATION_RULES: List[ClassificationRule] = build_rules()
WHOLE_WORD_RULES: List[ClassificationRule] = build_rules(whole_word_keywords=True)


def classify_account_name(
    account_name: str,
    ambiguous_is_business: bool = True,
    rules: Optional[List[ClassificationRule]] = None,
) -> AccountKind:
    """
    Classify an account holder name.

    Args:
        account_name: Name on the destination account
        ambiguous_is_business: Verdict when no rule matches (single words,
            very long names). Defaults to business, which favours showing
            more suggestions.
        rules: Override the rule table (ordered, first match wins)
    """
    for rule in rules if rules is not None else CLASSIFICATION_RULES:
        if rule.predicate(account_name):
            return rule.verdict

    return AccountKind.BUSINESS if ambiguous_is_business else AccountKind.INDIVIDUAL


def classify_account(
    account: DestinationAccount,
    ambiguous_is_business: bool = True,
    rules: Optional[List[ClassificationRule]] = None,
) -> AccountKind:
    """An explicit is_business flag on the account always wins over the name heuristics"""
    if account.is_business is not None:
        return AccountKind.BUSINESS if account.is_business else AccountKind.INDIVIDUAL
    return classify_account_name(account.account_name or "", ambiguous_is_business, rules)
