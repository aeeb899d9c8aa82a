'''Definitions of well known formats built with fixedstruct.'''
