import logging
from enum import Enum, auto
from typing import List


class ChunkPhase(Enum):
    '''Enum to state the actual phase of a chunk'''
    INIT      = 0
    RELAYOUTING = auto()
    PACKING   = auto()
    UNPACKING = auto()
    DONE      = auto()


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    while not condition(instance):
        if instance.father is None:
            raise AttributeError('no chunk satisfies the condition in the hierarchy')
        instance = instance.father

    return instance


def resolve(value, instance):
    '''Returns the value itself or, for a Dependency, what it resolves to.'''
    if isinstance(value, Dependency):
        return value.resolve(instance)

    return value


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(n=Dependency('.length'))

    and have the (internal) length of the string contained in the field named 'data'
    strictly connected to the field named 'length'.

    The syntax for defining the expression is inspired from module resolution
    with an extra element via the first char of the expression: we have the following

     - '.' indicates we refer to a field at the same level
     - otherwise the path starts from the root chunk
    '''
    def __init__(self, expression):
        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        self.logger.debug('trying to resolve \'%s\' for \'%s\'' % (
            self.expression,
            instance.__class__.__name__,
        ))

        fields_path: List[str] = self.expression.split('.')
        # '.miao'.split(".") -> ['', 'miao']
        # 'miao'.split(".") -> ['miao']

        if fields_path[0] == '':  # we have a relative dependency
            field = instance.father
            fields_path = fields_path[1:]
        else:
            field = get_root_from_chunk(instance)

        if field is None:
            raise AttributeError(f'cannot resolve \'{self.expression}\' for a field without father')

        for component_name in fields_path:
            field = getattr(field, component_name)
            self.logger.debug(' resolved sub-component "%s" from "%s"' % (
                field.__class__.__name__, component_name))

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        field = self.resolve_field(instance)
        value = field.value

        self.logger.debug(' resolved with value %r' % (value,))

        return value
