# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0


class PluginRegistry:
    """A plugin registry

    Resource kinds and metric outputs are both looked up by name, this
    is a simple string to class map with alias support.

    As an example of registering a resource kind::

      @resources.register('backendbucket', aliases=('backend-bucket',))
      class BackendBucket(ResourceAccessor):
          ...

    """

    def __init__(self, plugin_type):
        self.plugin_type = plugin_type
        self._factories = {}

    def register(self, name, klass=None, aliases=None):
        # invoked as function
        if klass:
            klass.type = name
            klass.type_aliases = aliases
            self._factories[name] = klass
            return klass

        # invoked as class decorator
        def _register_class(klass):
            self._factories[name] = klass
            klass.type = name
            klass.type_aliases = aliases
            return klass
        return _register_class

    def unregister(self, name):
        if name in self._factories:
            del self._factories[name]

    def __contains__(self, key):
        return self.get(key) is not None

    def __getitem__(self, name):
        v = self.get(name)
        if v is None:
            raise KeyError(name)
        return v

    def __len__(self):
        return len(self._factories)

    def get(self, name):
        factory = self._factories.get(name)

        if factory:
            return factory

        return next((v for k, v in self._factories.items()
                     if v.type_aliases and name in v.type_aliases),
                    None)

    def keys(self):
        return self._factories.keys()

    def values(self):
        return self._factories.values()

    def items(self):
        return self._factories.items()
