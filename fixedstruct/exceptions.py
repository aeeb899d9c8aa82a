class FixedStructException(Exception):
    '''Base class to extend in order to throw exception in fixedstruct.

    It takes as first argument the chain of the layers that caused the
    exception, i.e. the name of the struct followed by the name of the field.
    '''

    def __init__(self, chain, message=''):
        self.chain = list(chain)
        self.message = message
        super().__init__(message)

    def __str__(self):
        location = '.'.join(str(_) for _ in self.chain)
        if not location:
            return self.message

        return f'{location}: {self.message}' if self.message else location


class DefinitionException(FixedStructException):
    '''A field declares a size that is not a positive integer.'''
    pass


class UnpackException(FixedStructException):
    pass


class PackException(FixedStructException):
    pass


class MissingFieldException(PackException):
    '''The values passed for packing lack a declared field.'''
    pass
