from pydantic import BaseModel
from pydantic.alias_generators import to_camel

# JSON uses camelCase keys (teacherId, academicYear); snake_case is accepted on input too
class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
