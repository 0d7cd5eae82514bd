# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
List filters.

A filter renders to a compute api ``filter`` expression for server side
evaluation and can also be matched locally against a resource dict,
which in-memory clients use to emulate the api.

>>> str(regexp('name', 'lb-.*').and_(equal_bool('enableCdn', True)))
'(name eq lb-.*) (enableCdn eq true)'
"""
import re

import jmespath


class Filter:

    def __init__(self, predicates=()):
        self.predicates = tuple(predicates)

    def and_(self, other):
        return Filter(self.predicates + other.predicates)

    def match(self, resource):
        return all(p.match(resource) for p in self.predicates)

    def __bool__(self):
        return bool(self.predicates)

    def __str__(self):
        if len(self.predicates) == 1:
            return self.predicates[0].render()
        return " ".join("(%s)" % p.render() for p in self.predicates)

    def __repr__(self):
        return "<Filter %s>" % (str(self) or 'match-all')


class Predicate:

    def __init__(self, field, op, value):
        self.field = field
        self.op = op
        self.value = value
        self._expr = jmespath.compile(field)

    def render(self):
        v = self.value
        if isinstance(v, bool):
            v = str(v).lower()
        return "%s %s %s" % (self.field, self.op, v)

    def match(self, resource):
        found = self._expr.search(resource)
        if isinstance(self.value, bool) or isinstance(self.value, int):
            matched = found == self.value
        else:
            matched = found is not None and re.fullmatch(
                self.value, str(found)) is not None
        return matched if self.op == 'eq' else not matched


# matches everything, renders as no filter
NONE = Filter()


def regexp(field, value):
    return Filter((Predicate(field, 'eq', value),))


def not_regexp(field, value):
    return Filter((Predicate(field, 'ne', value),))


def equal_int(field, value):
    return Filter((Predicate(field, 'eq', int(value)),))


def not_equal_int(field, value):
    return Filter((Predicate(field, 'ne', int(value)),))


def equal_bool(field, value):
    return Filter((Predicate(field, 'eq', bool(value)),))


def not_equal_bool(field, value):
    return Filter((Predicate(field, 'ne', bool(value)),))
