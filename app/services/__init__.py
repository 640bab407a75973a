# Services package - storage, push channel and external integrations
# Import modules directly (app.services.store, ...); the generation service
# depends on app.workers, which in turn depends on the store and broadcaster.
