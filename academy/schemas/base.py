"""公共基类：线上字段使用 camelCase，Python 属性使用 snake_case。"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# SQLite INTEGER / BigInteger 能容纳的最大值
DB_INT_MAX = 2**63 - 1

RecordId = Annotated[int, Field(ge=1, le=DB_INT_MAX)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
