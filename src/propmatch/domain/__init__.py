# Domain layer: entities, repository interfaces and pure services
