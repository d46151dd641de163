# Infrastructure layer: configuration and storage backends
