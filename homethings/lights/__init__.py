"""Controlling the house lights through the lights controller."""