"""
Question Domain Model Module

This module defines the per-question statistics record kept in the remote
store, and the helpers that translate it to and from store rows.
"""

import enum
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Any, Dict, Iterable, Optional

RATE_QUANTUM = Decimal("0.01")

# Python field name -> store column name
COLUMNS: Dict[str, str] = {
    'question_file': 'QuestionFile',
    'difficulty': 'Difficulty',
    'success_rate': 'SuccessRate',
    'total_attempts': 'TotalAttempts',
    'correct_attempts': 'CorrectAttempts',
    'manual_override': 'ManualOverride',
    'last_updated': 'LastUpdated',
    'created_at': 'CreatedAt',
}

_FRACTION = re.compile(r"(\.\d+)")


class Difficulty(str, enum.Enum):
    """
    Difficulty tier of a question.
    
    UNRATED is only reachable for a question that has never been attempted
    (or that an operator pinned to it).
    """
    UNRATED = "unrated"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    
    @classmethod
    def parse(cls, value: Any) -> 'Difficulty':
        """Parse a tier name, case-insensitively. Raises ValueError on unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown difficulty '{value}'. Must be one of {[d.value for d in cls]}"
            ) from None


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def round_rate(value: Decimal) -> Decimal:
    """Round a percentage to two places, half-to-even."""
    return value.quantize(RATE_QUANTUM, rounding=ROUND_HALF_EVEN)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as returned by the store.
    
    Accepts a trailing ``Z`` and fractional seconds of any precision. Naive
    values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        # fromisoformat wants exactly 3 or 6 fractional digits on older Pythons
        text = _FRACTION.sub(lambda m: (m.group(1) + "000000")[:7], text, count=1)
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _normalize_key(key: Any) -> str:
    return str(key).replace("_", "").lower()


_NORMALIZED = {_normalize_key(field): field for field in COLUMNS}


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        if value.strip().lower() in ("true", "t", "1", "yes"):
            return True
        if value.strip().lower() in ("false", "f", "0", "no", ""):
            return False
        raise ValueError(f"Not a boolean: {value!r}")
    return bool(value)


@dataclass(frozen=True)
class QuestionRecord:
    """
    Per-question attempt statistics and difficulty classification.
    
    Attributes:
        question_file: Image file name identifying the question (unique, case-sensitive)
        difficulty: Current difficulty tier
        success_rate: Percentage of correct attempts, two decimal places
        total_attempts: Number of recorded attempts
        correct_attempts: Number of correct attempts, never above total_attempts
        manual_override: When true, new attempts do not reclassify the question
        created_at: When the record was created (UTC)
        last_updated: When the record was last written (UTC)
    """
    question_file: str
    difficulty: Difficulty = Difficulty.UNRATED
    success_rate: Decimal = Decimal("0")
    total_attempts: int = 0
    correct_attempts: int = 0
    manual_override: bool = False
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    
    def __post_init__(self):
        if self.total_attempts < 0 or self.correct_attempts < 0:
            raise ValueError("Attempt counters must be non-negative")
        if self.correct_attempts > self.total_attempts:
            raise ValueError(
                f"correct_attempts ({self.correct_attempts}) exceeds "
                f"total_attempts ({self.total_attempts}) for {self.question_file}"
            )
    
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the record to a JSON-friendly dictionary with Python field names.
        
        Returns:
            Dictionary representation of the record
        """
        return {
            'question_file': self.question_file,
            'difficulty': self.difficulty.value,
            'success_rate': float(self.success_rate),
            'total_attempts': self.total_attempts,
            'correct_attempts': self.correct_attempts,
            'manual_override': self.manual_override,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }
    
    def to_row(self, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Convert the record to a store row keyed by column name.
        
        Args:
            fields: Optional subset of Python field names to include
            
        Returns:
            Dictionary keyed by store column names
        """
        data = self.to_dict()
        selected = list(fields) if fields is not None else list(COLUMNS)
        return {COLUMNS[name]: data[name] for name in selected}
    
    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'QuestionRecord':
        """
        Create a record from a store row.
        
        Column names are matched case-insensitively, ignoring underscores.
        
        Args:
            row: Dictionary as returned by the store
            
        Returns:
            A QuestionRecord instance
            
        Raises:
            ValueError: If a value cannot be converted
            TypeError: If the row is not a mapping
        """
        if not isinstance(row, dict):
            raise TypeError(f"Expected a JSON object, got {type(row).__name__}")
        data = {}
        for key, value in row.items():
            field_name = _NORMALIZED.get(_normalize_key(key))
            if field_name is not None:
                data[field_name] = value
        
        rate = data.get('success_rate')
        return cls(
            question_file=str(data.get('question_file') or ""),
            difficulty=Difficulty.parse(data.get('difficulty') or Difficulty.UNRATED.value),
            success_rate=round_rate(Decimal(str(rate))) if rate is not None else Decimal("0"),
            total_attempts=int(data.get('total_attempts') or 0),
            correct_attempts=int(data.get('correct_attempts') or 0),
            manual_override=_to_bool(data.get('manual_override') or False),
            created_at=parse_timestamp(data.get('created_at')),
            last_updated=parse_timestamp(data.get('last_updated')),
        )


def column_for(field_name: str) -> str:
    """Store column name for a Python field name."""
    return COLUMNS[field_name]


def encode_value(value: Any) -> Any:
    """Convert a typed field value to its JSON representation for the store."""
    if isinstance(value, Difficulty):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def encode_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Map a partial update keyed by field name to a JSON object keyed by column."""
    return {column_for(name): encode_value(value) for name, value in changes.items()}
