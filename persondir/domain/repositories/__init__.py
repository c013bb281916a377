from .person_attribute_dao import PersonAttributeDao, DefaultQueryPersonAttributeDao
from .stub_person_attribute_dao import StubPersonAttributeDao

__all__ = [
    "PersonAttributeDao",
    "DefaultQueryPersonAttributeDao",
    "StubPersonAttributeDao",
]
