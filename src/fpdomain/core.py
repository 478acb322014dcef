"""
core.py — Dominio astratto per valori IEEE-754

================================================================================
DESIGN PRINCIPLES
================================================================================

1. NESSUN VALORE CONCRETO
   Un record descrive la "forma" raggiungibile di un float (NaN, zero,
   infinito, segno), mai il valore. Le funzioni di trasferimento non
   ispezionano numeri.

2. SOUNDNESS
   Ogni record prodotto da un'operazione deve accettare OGNI risultato
   concreto raggiungibile dagli input accettati. Sovra-approssimare e'
   permesso, sotto-approssimare mai.

3. IMMUTABILITA
   Frozen dataclass. Ogni operazione restituisce nuova istanza.
   Nessun side effect, safe per concorrenza.

4. WIDTH TYPE-SAFE
   La larghezza (32/64 bit) e' parte del tipo, come la valuta per Money.
   Mescolare larghezze diverse solleva TypeError, sempre.

================================================================================
IL RETICOLO
================================================================================

    No  <  ShouldNot  <  Should  <  Yes

    Yes        raggiungibile con la semantica normale
    Should     matematicamente raggiungibile, ma l'arrotondamento
               potrebbe renderlo non osservabile
    ShouldNot  matematicamente irraggiungibile, ma l'arrotondamento
               potrebbe renderlo osservabile (es. underflow a zero)
    No         mai raggiungibile

Join (|) = max, meet (&) = min.

================================================================================
"""

from __future__ import annotations
from dataclasses import dataclass, fields, replace as dc_replace
from enum import Enum
from functools import total_ordering
from typing import Callable, Optional
import logging
import math


logger = logging.getLogger(__name__)


# ==============================================================================
# POSSIBLE (reticolo a quattro livelli)
# ==============================================================================

@total_ordering
class Possible(Enum):
    """
    Livello di confidenza che una proprieta' booleana di un float sia
    raggiungibile.

    Esempio: se x e' un float finito strettamente positivo:
    - `x + 1.0` negativo?  No
    - `x + 1.0` positivo?  Yes
    - `x * x == 0.0`?      ShouldNot (MIN_POSITIVE * MIN_POSITIVE == 0.0)
    - `sin(x) == 0.0`?     Should (vero in R, raro in virgola mobile)
    """
    NO = ("no", 0)
    SHOULD_NOT = ("should_not", 1)
    SHOULD = ("should", 2)
    YES = ("yes", 3)

    def __init__(self, label: str, rank: int):
        self._label = label
        self._rank = rank

    @property
    def label(self) -> str:
        return self._label

    @property
    def rank(self) -> int:
        return self._rank

    @classmethod
    def default(cls) -> Possible:
        """Il livello piu' permissivo. Default di ogni campo di un record."""
        return cls.YES

    @classmethod
    def from_label(cls, label: str) -> Possible:
        for member in cls:
            if member._label == label:
                return member
        raise ValueError(f"Livello sconosciuto: {label!r}")

    @staticmethod
    def any(a: Possible, b: Possible) -> Possible:
        """
        Se qualcosa e' possibile per due ragioni indipendenti,
        vale la piu' forte delle due.

            Possible.any(Possible.YES, Possible.SHOULD) == Possible.YES
            Possible.any(Possible.NO, Possible.NO) == Possible.NO
        """
        return max(a, b)

    @staticmethod
    def all(a: Possible, b: Possible) -> Possible:
        """
        Se servono due precondizioni indipendenti insieme,
        vale la piu' debole delle due.
        """
        return min(a, b)

    def is_possible(self) -> bool:
        return self is not Possible.NO

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Possible):
            return NotImplemented
        return self._rank < other._rank

    def __or__(self, other: object) -> Possible:
        if not isinstance(other, Possible):
            return NotImplemented
        return Possible.any(self, other)

    def __and__(self, other: object) -> Possible:
        if not isinstance(other, Possible):
            return NotImplemented
        return Possible.all(self, other)

    def __repr__(self) -> str:
        return f"Possible.{self.name}"


Yes = Possible.YES
Should = Possible.SHOULD
ShouldNot = Possible.SHOULD_NOT
No = Possible.NO


# ==============================================================================
# FLOAT POSSIBILITIES (il record)
# ==============================================================================

@dataclass(frozen=True, slots=True)
class FloatPossibilities:
    """
    Forma raggiungibile di un float: cinque flag indipendenti.

    I flag NON sono una partizione: "forse zero" e "forse positivo"
    insieme descrivono +0.0.

    INVARIANTI:
    1. Ogni campo e' un Possible
    2. Il record e' immutabile; union() e intersection() restituiscono
       nuove istanze
    3. union e' associativa, commutativa, idempotente

    USAGE:
        fp = FloatPossibilities(nan=No, infinite=No)
        fp.accept(1.0)           # True
        fp.accept(math.inf)      # False
    """
    nan: Possible = Possible.YES
    zero: Possible = Possible.YES
    infinite: Possible = Possible.YES
    positive: Possible = Possible.YES
    negative: Possible = Possible.YES

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, Possible):
                raise TypeError(
                    f"Campo {f.name} deve essere Possible, "
                    f"ricevuto: {type(value).__name__}"
                )

    # -------------------------------------------------------------------------
    # Costruttori
    # -------------------------------------------------------------------------

    @classmethod
    def abstract(cls, value: float) -> FloatPossibilities:
        """
        Il record piu' stretto che accetta il valore (astrazione alpha).

        Per ogni v: FloatPossibilities.abstract(v).accept(v) e' True.
        """
        if math.isnan(value):
            return cls(nan=Possible.YES, zero=Possible.NO, infinite=Possible.NO,
                       positive=Possible.NO, negative=Possible.NO)

        negative = math.copysign(1.0, value) < 0

        return cls(
            nan=Possible.NO,
            zero=Possible.YES if value == 0.0 else Possible.NO,
            infinite=Possible.YES if math.isinf(value) else Possible.NO,
            positive=Possible.NO if negative else Possible.YES,
            negative=Possible.YES if negative else Possible.NO,
        )

    # -------------------------------------------------------------------------
    # Test di appartenenza (ponte astratto -> concreto)
    # -------------------------------------------------------------------------

    def accept(self, value: float) -> bool:
        """
        True se il record permette il valore concreto.

        Solo per test e harness di verifica: le funzioni di trasferimento
        non lo chiamano mai.

        Il segno e' letto dal bit di segno: -0.0 e' negativo.
        """
        if math.isnan(value):
            return self.nan is not Possible.NO

        if math.isinf(value) and self.infinite is Possible.NO:
            return False

        if value == 0.0 and self.zero is Possible.NO:
            return False

        negative = math.copysign(1.0, value) < 0

        if not negative and self.positive is Possible.NO:
            return False

        if negative and self.negative is Possible.NO:
            return False

        return True

    # -------------------------------------------------------------------------
    # Operazioni di reticolo (campo per campo)
    # -------------------------------------------------------------------------

    def union(self, other: FloatPossibilities) -> FloatPossibilities:
        """Join campo per campo: forma di due rami di controllo indipendenti."""
        return FloatPossibilities(
            nan=self.nan | other.nan,
            zero=self.zero | other.zero,
            infinite=self.infinite | other.infinite,
            positive=self.positive | other.positive,
            negative=self.negative | other.negative,
        )

    def intersection(self, other: FloatPossibilities) -> FloatPossibilities:
        """Meet campo per campo."""
        return FloatPossibilities(
            nan=self.nan & other.nan,
            zero=self.zero & other.zero,
            infinite=self.infinite & other.infinite,
            positive=self.positive & other.positive,
            negative=self.negative & other.negative,
        )

    def __or__(self, other: object) -> FloatPossibilities:
        if not isinstance(other, FloatPossibilities):
            return NotImplemented
        return self.union(other)

    def __and__(self, other: object) -> FloatPossibilities:
        if not isinstance(other, FloatPossibilities):
            return NotImplemented
        return self.intersection(other)

    def replace(self, **changes: Possible) -> FloatPossibilities:
        """Copia con alcuni campi sostituiti."""
        return dc_replace(self, **changes)

    # -------------------------------------------------------------------------
    # Serializzazione
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """
        Formato: {"nan": "yes", "zero": "no", ...}

        I livelli sono serializzati per label, MAI per rank numerico.
        """
        return {f.name: getattr(self, f.name).label for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> FloatPossibilities:
        """
        Campi mancanti valgono Yes.

        Raises:
            ValueError: se compare un campo sconosciuto
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Campi sconosciuti: {unknown}")
        return cls(**{
            f.name: Possible.from_label(data[f.name])
            for f in fields(cls)
            if f.name in data
        })

    def __repr__(self) -> str:
        body = ", ".join(
            f"{f.name}={getattr(self, f.name).name}" for f in fields(self)
        )
        return f"FP({body})"


FP = FloatPossibilities


# Record notevoli
ANY_POSSIBILITIES = FP()

ZERO_POSSIBILITIES = FP(nan=No, zero=Yes, infinite=No, positive=Yes, negative=No)

ZERO_NEG_POSSIBILITIES = FP(nan=No, zero=Yes, infinite=No, positive=No, negative=Yes)

INF_POSSIBILITIES = FP(nan=No, zero=No, infinite=Yes, positive=Yes, negative=Yes)

INF_NEG_POSSIBILITIES = FP(nan=No, zero=No, infinite=Yes, positive=No, negative=Yes)


# ==============================================================================
# WIDTH (32 / 64 bit)
# ==============================================================================

class Width(Enum):
    """
    Larghezze supportate.

    Come Currency per Money: la larghezza e' parte del tipo,
    non un parametro runtime da convertire implicitamente.
    """
    F32 = ("f32", 32)
    F64 = ("f64", 64)

    def __init__(self, label: str, bits: int):
        self._label = label
        self._bits = bits

    @property
    def label(self) -> str:
        return self._label

    @property
    def bits(self) -> int:
        return self._bits


class WidthMismatchError(TypeError):
    """
    Due argomenti di larghezza diversa passati a un'operazione binaria.

    Violazione di contratto: bug del chiamante, non condizione runtime.
    Non va gestita, va corretta.
    """

    def __init__(self, lhs: Width, rhs: Width):
        self.lhs = lhs
        self.rhs = rhs
        super().__init__(
            f"Larghezze diverse: {lhs.label} e {rhs.label}. "
            f"Converti esplicitamente prima di combinare."
        )


# ==============================================================================
# FLOAT ARG (record con tag di larghezza)
# ==============================================================================

@dataclass(frozen=True, slots=True)
class FloatArg:
    """
    Record di possibilita' etichettato con la larghezza.

    INVARIANTI:
    1. width e' sempre Width, possibilities sempre FloatPossibilities
    2. Le operazioni preservano la larghezza
    3. Operazioni binarie tra larghezze diverse sollevano WidthMismatchError

    USAGE:
        x = FloatArg.f64(nan=No, infinite=No)
        y = ops.sqrt(x)          # FloatArg(F64, ...)
    """
    width: Width
    possibilities: FloatPossibilities

    def __post_init__(self) -> None:
        if not isinstance(self.width, Width):
            raise TypeError(f"width deve essere Width, non {type(self.width).__name__}")
        if not isinstance(self.possibilities, FloatPossibilities):
            raise TypeError(
                f"possibilities deve essere FloatPossibilities, "
                f"non {type(self.possibilities).__name__}"
            )

    # -------------------------------------------------------------------------
    # Costruttori
    # -------------------------------------------------------------------------

    @classmethod
    def of(
        cls,
        width: Width,
        fp: Optional[FloatPossibilities] = None,
        **flags: Possible,
    ) -> FloatArg:
        """
        Costruttore generico: da un record esistente oppure dai cinque campi.
        Campi non indicati valgono Yes.
        """
        if fp is not None and flags:
            raise ValueError("Indicare un record oppure i campi, non entrambi")
        if fp is None:
            fp = FloatPossibilities(**flags)
        return cls(width=width, possibilities=fp)

    @classmethod
    def f32(cls, fp: Optional[FloatPossibilities] = None, **flags: Possible) -> FloatArg:
        return cls.of(Width.F32, fp, **flags)

    @classmethod
    def f64(cls, fp: Optional[FloatPossibilities] = None, **flags: Possible) -> FloatArg:
        return cls.of(Width.F64, fp, **flags)

    # -------------------------------------------------------------------------
    # Proprieta' e output
    # -------------------------------------------------------------------------

    @property
    def fp(self) -> FloatPossibilities:
        """Alias breve di possibilities."""
        return self.possibilities

    def accept(self, value: float) -> bool:
        return self.possibilities.accept(value)

    def to_dict(self) -> dict:
        """Formato: {"width": "f64", "possibilities": {...}}"""
        return {
            "width": self.width.label,
            "possibilities": self.possibilities.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> FloatArg:
        width = next((w for w in Width if w.label == data["width"]), None)
        if width is None:
            raise ValueError(f"Larghezza sconosciuta: {data['width']!r}")
        return cls(
            width=width,
            possibilities=FloatPossibilities.from_dict(data["possibilities"]),
        )

    def __repr__(self) -> str:
        return f"{self.width.label}{self.possibilities!r}"


# ==============================================================================
# DISPATCH PER LARGHEZZA
# ==============================================================================

def map_float(
    arg: FloatArg,
    possibilities: Callable[[FloatPossibilities], FloatPossibilities],
) -> FloatArg:
    """Applica una trasformazione di record preservando la larghezza."""
    return FloatArg(width=arg.width, possibilities=possibilities(arg.possibilities))


def map_float2(
    lhs: FloatArg,
    rhs: FloatArg,
    possibilities: Callable[[FloatPossibilities, FloatPossibilities], FloatPossibilities],
) -> FloatArg:
    """
    Come map_float, per due argomenti.

    Raises:
        WidthMismatchError: se le larghezze differiscono. Il controllo
        avviene PRIMA di calcolare qualsiasi campo.
    """
    if lhs.width is not rhs.width:
        logger.error(
            "Width mismatch in binary operation: %s vs %s",
            lhs.width.label, rhs.width.label,
        )
        raise WidthMismatchError(lhs.width, rhs.width)
    return FloatArg(
        width=lhs.width,
        possibilities=possibilities(lhs.possibilities, rhs.possibilities),
    )
