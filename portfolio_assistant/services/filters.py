"""
Filter State - Per-category filter selections and the date-range selection.

Each category (account, asset class, tag, holding) and the date range is
an explicit FilterField: its options, its current value and whether it is
disabled. The manager rebuilds the fields whenever the host hands over a
new user or new permissions, and emits the selection on apply.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from gi.repository import GObject
from loguru import logger

from ..exceptions import FilterDisabledError, InvalidFilterSelection
from ..utils.helpers import identity_translate
from .holdings import HoldingsCache
from .user import Permissions, User


class FilterType(str, Enum):
    ACCOUNT = "ACCOUNT"
    ASSET_CLASS = "ASSET_CLASS"
    TAG = "TAG"
    SYMBOL = "SYMBOL"


# Fixed catalogs, in display order
ASSET_CLASSES = (
    "ALTERNATIVE_INVESTMENT",
    "COMMODITY",
    "EQUITY",
    "FIXED_INCOME",
    "LIQUIDITY",
    "REAL_ESTATE",
)

DATE_RANGES = ("1d", "wtd", "mtd", "ytd", "1y", "5y", "max")


@dataclass(frozen=True)
class FilterSelection:
    """One entry of the list emitted on apply; id None means unset."""
    type: FilterType
    id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"id": self.id, "type": self.type.value}


@dataclass(frozen=True)
class FilterOption:
    id: str
    label: str
    type: FilterType


@dataclass(frozen=True)
class DateRangeOption:
    label: str
    value: str

    @property
    def id(self) -> str:
        return self.value


def date_range_options(translate: Callable[[str], str] = identity_translate) -> list[DateRangeOption]:
    """Build the date-range catalog with translated labels."""
    t = translate
    labels = {
        "1d": t("Today"),
        "wtd": f"{t('Week to date')} ({t('WTD')})",
        "mtd": f"{t('Month to date')} ({t('MTD')})",
        "ytd": f"{t('Year to date')} ({t('YTD')})",
        "1y": f"1 {t('year')} ({t('1Y')})",
        "5y": f"5 {t('years')} ({t('5Y')})",
        "max": t("Max"),
    }
    return [DateRangeOption(label=labels[value], value=value) for value in DATE_RANGES]


Option = Union[FilterOption, DateRangeOption]


@dataclass
class FilterField:
    """
    State of one selectable input.

    set() validates user choices; reset() restores a persisted value
    as-is, even one that is no longer among the options.
    """
    name: str
    options: list[Option] = field(default_factory=list)
    value: Optional[str] = None
    disabled: bool = False

    def option_ids(self) -> list[str]:
        return [option.id for option in self.options]

    def set(self, value: Optional[str]) -> None:
        """
        Select value (None clears).

        Raises:
            FilterDisabledError: If the field is disabled
            InvalidFilterSelection: If value is not among the options
        """
        if self.disabled:
            raise FilterDisabledError(self.name)
        if value is not None and value not in self.option_ids():
            raise InvalidFilterSelection(self.name, value)
        self.value = value

    def reset(self, value: Optional[str] = None) -> None:
        self.value = value

    def enable(self) -> None:
        self.disabled = False

    def disable(self) -> None:
        self.disabled = True


class FilterStateManager(GObject.Object):
    """
    Holds the filter form state.

    Signals:
        filters-changed(selections): Emitted on apply with the 4-entry list
        date-range-changed(value): A date range was selected
        closed: Emitted after filters-changed on apply

    Methods:
        update(user, permissions): Re-derive options, permissions and values
        select(type, id): Select within one category
        select_date_range(value): Select and announce a date range
        apply(): Emit the current selections
    """

    __gtype_name__ = "FilterStateManager"

    __gsignals__ = {
        "filters-changed": (GObject.SignalFlags.RUN_FIRST, None, (object,)),
        "date-range-changed": (GObject.SignalFlags.RUN_FIRST, None, (str,)),
        "closed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, holdings: HoldingsCache, translate: Callable[[str], str] = identity_translate):
        super().__init__()

        self.holdings = holdings
        self.translate = translate

        self.fields: dict[FilterType, FilterField] = {
            FilterType.ACCOUNT: FilterField("account"),
            FilterType.ASSET_CLASS: FilterField("assetClass"),
            FilterType.TAG: FilterField("tag"),
            FilterType.SYMBOL: FilterField("holding"),
        }
        self.date_range = FilterField("dateRange")

        # Holdings arrive asynchronously after the first update()
        self.holdings.connect("changed", lambda cache: self.refresh_holdings())

    @property
    def account(self) -> FilterField:
        return self.fields[FilterType.ACCOUNT]

    @property
    def asset_class(self) -> FilterField:
        return self.fields[FilterType.ASSET_CLASS]

    @property
    def tag(self) -> FilterField:
        return self.fields[FilterType.TAG]

    @property
    def holding(self) -> FilterField:
        return self.fields[FilterType.SYMBOL]

    def update(self, user: Optional[User], permissions: Permissions) -> None:
        """
        Re-initialise from a new user or new permissions.

        Args:
            user: Signed-in user, or None while unknown
            permissions: Host-computed flags
        """
        user = user or User()
        t = self.translate

        self.asset_class.options = [
            FilterOption(id=asset_class, label=t(asset_class), type=FilterType.ASSET_CLASS)
            for asset_class in ASSET_CLASSES
        ]
        self.account.options = [
            FilterOption(id=account.id, label=account.name, type=FilterType.ACCOUNT)
            for account in user.accounts
        ]
        self.tag.options = [
            FilterOption(id=tag.id, label=t(tag.name), type=FilterType.TAG)
            for tag in user.tags
            if tag.is_used
        ]
        self.refresh_holdings()
        self.date_range.options = date_range_options(t)

        if permissions.has_permission_to_change_date_range:
            self.date_range.enable()
        else:
            self.date_range.disable()
        self.date_range.reset(user.settings.get("dateRange"))

        for filter_field in self.fields.values():
            if permissions.has_permission_to_change_filters:
                filter_field.enable()
            else:
                filter_field.disable()

        self.account.reset(user.first_setting("filters.accounts"))
        self.asset_class.reset(user.first_setting("filters.assetClasses"))
        self.tag.reset(user.first_setting("filters.tags"))
        # Holding filter is not persisted
        self.holding.reset(None)

        if not self.tag.options:
            self.tag.disable()

        logger.debug(
            f"Filters updated: {len(self.account.options)} accounts, "
            f"{len(self.tag.options)} tags, {len(self.holding.options)} holdings"
        )

    def refresh_holdings(self) -> None:
        """Rebuild holding options from the cache."""
        self.holding.options = [
            FilterOption(id=holding.symbol, label=holding.name, type=FilterType.SYMBOL)
            for holding in self.holdings.holdings
        ]

    def find_holdings(self, query: str, limit: int = 10) -> list[FilterOption]:
        """Holding options matching query, for the holding picker."""
        return [
            FilterOption(id=holding.symbol, label=holding.name, type=FilterType.SYMBOL)
            for holding in self.holdings.match(query, limit)
        ]

    def select(self, filter_type: FilterType, value: Optional[str]) -> None:
        self.fields[FilterType(filter_type)].set(value)

    def select_date_range(self, value: str) -> None:
        """
        Select a date range and announce it right away.

        Raises:
            FilterDisabledError: If changing the date range is not permitted
            InvalidFilterSelection: If value is not a catalog range code
        """
        self.date_range.set(value)
        self.emit("date-range-changed", value)

    @property
    def selections(self) -> list[FilterSelection]:
        """Current selections, one per category in fixed order."""
        return [
            FilterSelection(type=filter_type, id=filter_field.value)
            for filter_type, filter_field in self.fields.items()
        ]

    def apply(self) -> list[FilterSelection]:
        """Emit filters-changed with the current selections, then closed."""
        selections = self.selections
        logger.debug(f"Applying filters: {[s.to_dict() for s in selections]}")
        self.emit("filters-changed", selections)
        self.emit("closed")
        return selections
