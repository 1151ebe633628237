"""Place for the tanks tools; it holds no modules."""