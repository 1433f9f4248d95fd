"""HTTP cross-cutting helpers: problem+json handlers and request ids."""
