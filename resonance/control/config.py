DEFAULTS = dict(
    settings=dict(
        intensity=1.0,
        particleCount=20,
        glowEnabled=True,
        colorMode="emotional",
        animationSpeed=1.0,
        showInnerPatterns=True,
    ),
    signature=dict(
        emotional_valence=0.0,
        cognitive_complexity=0.5,
        energy_level=0.5,
        glyph_parameters=dict(
            shape_complexity=0.5,
            color_hue=0.75,
            animation_speed=0.5,
            resonance_frequency=3.0,
        ),
    ),
    system=dict(dprClamp=2.0, frameIntervalMs=16, transparent=False),
)

COLOR_MODES = ("emotional", "archetypal", "energy", "monochrome")

TOOLTIPS = {
    "settings.intensity": "Amplifie la respiration et la profondeur des lobes du glyphe.",
    "settings.particleCount": "Nombre maximal de particules d’énergie autour du glyphe.",
    "settings.glowEnabled": "Ajoute un halo lumineux par-dessus le contour.",
    "settings.colorMode": "Choisit la formule de couleur : émotionnelle, archétypale, énergie ou monochrome.",
    "settings.animationSpeed": "Multiplie la vitesse d’animation du glyphe.",
    "settings.showInnerPatterns": "Affiche les motifs de résonance internes quand la complexité est élevée.",
    "signature.emotional_valence": "Tonalité émotionnelle, de très négative (-1) à très positive (+1).",
    "signature.cognitive_complexity": "Complexité cognitive : profondeur des lobes et motifs internes.",
    "signature.energy_level": "Niveau d’énergie : luminosité, respiration et particules.",
    "signature.shape_complexity": "Nombre de sommets du contour (3 à 15).",
    "signature.color_hue": "Teinte principale, normalisée entre 0 et 1.",
    "signature.animation_speed": "Vitesse propre au glyphe, normalisée entre 0 et 1.",
    "signature.resonance_frequency": "Nombre de lobes tracés autour de la forme (1 à 10).",
    "system.dprClamp": "Limite la résolution utilisée pour protéger les performances.",
    "system.frameIntervalMs": "Intervalle entre deux images (0 met l’animation en pause).",
    "system.transparent": "Permet de rendre la fenêtre de prévisualisation transparente.",
}
