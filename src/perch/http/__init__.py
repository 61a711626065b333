"""HTTP primitives: headers, query strings, URLs, bodies, static streaming."""
