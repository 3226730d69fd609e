"""Pet item catalogue and purchases."""
import logging
from typing import Dict

from errors import InsufficientCoins, ItemAlreadyOwned, ItemNotFound, UserNotFound
from repositories import UserRepository
from schemas import PurchaseResponse, ShopItem

log = logging.getLogger(__name__)

CATALOGUE = [
    ShopItem(id="hat1", name="Party Hat", emoji="🎉", category="hat", price=50, rarity="uncommon"),
    ShopItem(id="hat2", name="Royal Crown", emoji="👑", category="hat", price=150, rarity="legendary"),
    ShopItem(id="hat3", name="Wizard Hat", emoji="🧙", category="hat", price=100, rarity="epic"),
    ShopItem(id="hat4", name="Sun Hat", emoji="👒", category="hat", price=40, rarity="uncommon"),
    ShopItem(id="outfit1", name="Superhero Cape", emoji="🦸", category="outfit", price=120, rarity="epic"),
    ShopItem(id="outfit2", name="Cozy Sweater", emoji="🧥", category="outfit", price=60, rarity="uncommon"),
    ShopItem(id="outfit3", name="Formal Tuxedo", emoji="🤵", category="outfit", price=180, rarity="legendary"),
    ShopItem(id="acc1", name="Cool Sunglasses", emoji="😎", category="accessory", price=35, rarity="uncommon"),
    ShopItem(id="acc2", name="Bow Tie", emoji="🎀", category="accessory", price=30, rarity="uncommon"),
    ShopItem(id="acc3", name="Flower Crown", emoji="🌸", category="accessory", price=55, rarity="rare"),
    ShopItem(id="bg1", name="Beach Paradise", emoji="🏖️", category="background", price=90, rarity="rare"),
    ShopItem(id="bg2", name="Space Odyssey", emoji="🚀", category="background", price=140, rarity="epic"),
    ShopItem(id="bg5", name="Crystal Palace", emoji="🏰", category="background", price=200, rarity="legendary"),
]

ITEMS_BY_ID: Dict[str, ShopItem] = {item.id: item for item in CATALOGUE}


def purchase(users: UserRepository, user_id: str, item_id: str) -> PurchaseResponse:
    item = ITEMS_BY_ID.get(item_id)
    if item is None:
        raise ItemNotFound()

    updated = users.spend_coins(user_id, item.price, item.id)
    if updated is None:
        # work out why the conditional update matched nothing
        user = users.get(user_id)
        if user is None:
            raise UserNotFound()
        if item.id in user.get("pet_data", {}).get("items", []):
            raise ItemAlreadyOwned()
        raise InsufficientCoins(f"{item.name} costs {item.price} coins, you have {user.get('total_coins', 0)}")

    log.info("User %s bought %s for %d coins", user_id, item.id, item.price)
    return PurchaseResponse(item=item, total_coins=updated["total_coins"], items=updated["pet_data"]["items"])
