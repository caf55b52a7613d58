from typing import Annotated, Tuple
from datetime import datetime, timedelta
from enum import Enum
from uuid import UUID
from pydantic import AliasChoices, AnyUrl, BaseModel, ConfigDict, Field, StrictBool, StrictStr

from tariffconv.data.codecs import (
    DURATION,
    TAGGED_DATE,
    URL_CODEC,
    UTC_DATETIME,
    UUID_CODEC,
    codec_field,
)


# Беззнаковое 32-битное целое; bool, float и строки не принимаются
U32 = Annotated[int, Field(strict=True, ge=0, le=2**32 - 1)]

Duration = codec_field(timedelta, DURATION)
TaggedDate = codec_field(str, TAGGED_DATE)
UserId = codec_field(UUID, UUID_CODEC)
ShardUrl = codec_field(AnyUrl, URL_CODEC)
UtcDateTime = codec_field(datetime, UTC_DATETIME)


class WireModel(BaseModel):
    """Базовая модель документа: неизменяемая, лишние поля игнорируются."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class RequestKind(str, Enum):
    """Тип запроса. На проводе только "success" или "failure"."""

    SUCCESS = "success"
    FAILURE = "failure"


class PublicTariff(WireModel):
    """Публичный тариф стрима."""

    id: U32 = Field(..., description="Идентификатор тарифа")
    price: U32 = Field(..., description="Цена в минимальных единицах валюты")
    duration: Duration = Field(..., description="Длительность, например \"1h\" или \"30days\"")
    description: StrictStr


class PrivateTariff(WireModel):
    """Приватный тариф. Идентификатора нет: такие тарифы не адресуются отдельно."""

    client_price: U32
    duration: Duration
    description: StrictStr


class Stream(WireModel):
    """Настройки тарификации одного стрима."""

    user_id: UserId = Field(..., description="UUID пользователя в виде 8-4-4-4-12")
    is_private: StrictBool
    settings: U32 = Field(..., description="Битовая маска настроек, не интерпретируется")
    shard_url: ShardUrl = Field(..., description="Абсолютный URL шарда")
    public_tariff: PublicTariff
    private_tariff: PrivateTariff


class Gift(WireModel):
    id: U32
    price: U32
    description: StrictStr


class Debug(WireModel):
    duration: Duration
    at: UtcDateTime = Field(..., description="Момент времени с явным смещением, хранится в UTC")


class Request(WireModel):
    """Запрос: тип, стрим, подарки и отладочная информация.

    На проводе поле kind называется "type"; при разборе принимается и "kind".
    Порядок подарков сохраняется, повторяющиеся id допустимы.
    """

    kind: RequestKind = Field(
        ...,
        validation_alias=AliasChoices("type", "kind"),
        serialization_alias="type",
    )
    stream: Stream
    gifts: Tuple[Gift, ...]
    debug: Debug


class Event(WireModel):
    """Событие с датой, которая на проводе записывается с префиксом "Date: "."""

    name: StrictStr
    date: TaggedDate
