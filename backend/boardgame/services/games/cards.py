"""Prize cards granted for a correct answer.

Cards are values, never persisted. Draws take an injected randomness source
exposing ``randrange(n)`` so tests can script the outcome.
"""

import enum
from dataclasses import dataclass, replace
from typing import Optional

from boardgame.models import STATUS_ACTIVE
from .blocking import current_slot, next_slot, status_at_slot
from .movement import move_by_exact
from .scoring import finish_if_winner


class CardKind(enum.Enum):
    MOVE_2 = 'MOVE_2'
    MOVE_3 = 'MOVE_3'
    BLOCK_NEXT = 'BLOCK_NEXT'
    SHIELD = 'SHIELD'


@dataclass(frozen=True)
class PrizeCard:
    kind: CardKind
    title: str
    description: str
    icon: str
    target_user_id: Optional[int] = None

    @property
    def code(self) -> str:
        return self.kind.value

    def to_dict(self):
        return {
            'code': self.code,
            'title': self.title,
            'description': self.description,
            'icon': self.icon,
            'targetUserId': self.target_user_id,
        }


CARDS = {
    CardKind.MOVE_2: PrizeCard(CardKind.MOVE_2, 'Warp Boost', 'Move +2 tiles immediately', '🚀'),
    CardKind.MOVE_3: PrizeCard(CardKind.MOVE_3, 'Hyper Jump', 'Move +3 tiles immediately', '🪐'),
    CardKind.BLOCK_NEXT: PrizeCard(CardKind.BLOCK_NEXT, 'Meteor Trap', 'Block the next player (skip their next turn)', '☄️'),
    CardKind.SHIELD: PrizeCard(CardKind.SHIELD, 'Cosmic Shield', 'Gain a shield (cancels one block)', '🛡️'),
}

# MOVE_2 appears twice, so it is drawn twice as often as the others
DRAW_POOL = (
    CardKind.MOVE_2,
    CardKind.MOVE_2,
    CardKind.MOVE_3,
    CardKind.BLOCK_NEXT,
    CardKind.SHIELD,
)

MOVE_DISTANCE = {
    CardKind.MOVE_2: 2,
    CardKind.MOVE_3: 3,
}


def draw_card(rng) -> PrizeCard:
    return CARDS[DRAW_POOL[rng.randrange(len(DRAW_POOL))]]


def apply_card(game, actor, statuses, card: PrizeCard, now: int) -> PrizeCard:
    """Apply ``card`` for ``actor`` and return the card as shown to clients.

    No-op unless the game is still ACTIVE. Moves use exact landing and are
    followed by a winner check. BLOCK_NEXT blocks the player after the
    active slot and records them as the card's target.
    """
    if card is None or actor is None or game is None:
        return card
    if game.status != STATUS_ACTIVE:
        return card

    kind = card.kind
    if kind in MOVE_DISTANCE:
        move_by_exact(actor, MOVE_DISTANCE[kind])
        finish_if_winner(game, actor, now)
        return card

    if kind is CardKind.SHIELD:
        actor.has_shield = True
        return card

    if kind is CardKind.BLOCK_NEXT:
        n = len(statuses)
        if n <= 0:
            return card
        target = status_at_slot(statuses, next_slot(current_slot(game), n))
        if target is None:
            return card
        target.blocked = True
        return replace(card, target_user_id=target.player_id)

    raise ValueError(f'Unhandled prize card kind: {kind!r}')
