from __future__ import annotations

import enum

USER_ID_HEADER = "user-id"
CHAT_TOPIC_PREFIX = "/topic/chats/"
IMAGE_PREVIEW_TEXT = "Sent a photo"
URL_PREVIEW_TEXT = "Sent a link"
NEW_MESSAGE_ALARM_PREFIX = "New message: "


class MessageType(str, enum.Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    URL = "URL"


class Category(str, enum.Enum):
    HOME_APPLIANCE = "HOME_APPLIANCE"
    HEALTH_FOOD = "HEALTH_FOOD"
    BEAUTY = "BEAUTY"
    FOOD_PROCESSED = "FOOD_PROCESSED"
    PET = "PET"
    DIGITAL = "DIGITAL"
    LIVING_KITCHEN = "LIVING_KITCHEN"
    WOMEN_ACC = "WOMEN_ACC"
    SPORTS = "SPORTS"
    PLANT = "PLANT"
    GAME_HOBBY = "GAME_HOBBY"
    TICKET = "TICKET"
    FURNITURE = "FURNITURE"
    BOOK = "BOOK"
    KIDS = "KIDS"
    CLOTHES = "CLOTHES"
    ETC = "ETC"


class TradeMethod(str, enum.Enum):
    SHIPPING = "SHIPPING"
    IN_PERSON = "IN_PERSON"
    OTHER = "OTHER"
