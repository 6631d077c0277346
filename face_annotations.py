from typing import Dict, List

import numpy as np

# Mesh indices on the 468-point face mesh.
FOREHEAD_INDEX = 10
CHIN_INDEX = 152
LEFT_CHEEK_EDGE_INDEX = 234
RIGHT_CHEEK_EDGE_INDEX = 454

# Dots drawn over the eye corner and brow when eye markers are enabled.
EYE_MARKER_INDICES = (259, 28)

MESH_POINT_COUNT = 468

# Side of the square face crop the head-turn bounds are tuned in, and how far
# the crop extends past the mesh bounding box.
LOCAL_MESH_SIZE = 192
LOCAL_CROP_MARGIN = 1.25

MESH_ANNOTATIONS: Dict[str, List[int]] = {
    "silhouette": [
        10, 338, 297, 332, 284, 251, 389, 356, 454, 323, 361, 288,
        397, 365, 379, 378, 400, 377, 152, 148, 176, 149, 150, 136,
        172, 58, 132, 93, 234, 127, 162, 21, 54, 103, 67, 109,
    ],
    "lipsUpperOuter": [61, 185, 40, 39, 37, 0, 267, 269, 270, 409, 291],
    "lipsLowerOuter": [146, 91, 181, 84, 17, 314, 405, 321, 375, 291],
    "lipsUpperInner": [78, 191, 80, 81, 82, 13, 312, 311, 310, 415, 308],
    "lipsLowerInner": [78, 95, 88, 178, 87, 14, 317, 402, 318, 324, 308],
    "rightEyeUpper0": [246, 161, 160, 159, 158, 157, 173],
    "rightEyeLower0": [33, 7, 163, 144, 145, 153, 154, 155, 133],
    "rightEyeUpper1": [247, 30, 29, 27, 28, 56, 190],
    "rightEyeLower1": [130, 25, 110, 24, 23, 22, 26, 112, 243],
    "rightEyeUpper2": [113, 225, 224, 223, 222, 221, 189],
    "rightEyeLower2": [226, 31, 228, 229, 230, 231, 232, 233, 244],
    "rightEyeLower3": [143, 111, 117, 118, 119, 120, 121, 128, 245],
    "rightEyebrowUpper": [156, 70, 63, 105, 66, 107, 55, 193],
    "rightEyebrowLower": [35, 124, 46, 53, 52, 65],
    "leftEyeUpper0": [466, 388, 387, 386, 385, 384, 398],
    "leftEyeLower0": [263, 249, 390, 373, 374, 380, 381, 382, 362],
    "leftEyeUpper1": [467, 260, 259, 257, 258, 286, 414],
    "leftEyeLower1": [359, 255, 339, 254, 253, 252, 256, 341, 463],
    "leftEyeUpper2": [342, 445, 444, 443, 442, 441, 413],
    "leftEyeLower2": [446, 261, 448, 449, 450, 451, 452, 453, 464],
    "leftEyeLower3": [372, 340, 346, 347, 348, 349, 350, 357, 465],
    "leftEyebrowUpper": [383, 300, 293, 334, 296, 336, 285, 417],
    "leftEyebrowLower": [265, 353, 276, 283, 282, 295],
    "midwayBetweenEyes": [168],
    "noseTip": [1],
    "noseBottom": [2],
    "noseRightCorner": [98],
    "noseLeftCorner": [327],
    "rightCheek": [205],
    "leftCheek": [425],
}


def build_annotations(mesh: np.ndarray) -> Dict[str, np.ndarray]:
    """Group mesh points into the named anatomical regions.

    Groups whose indices fall outside ``mesh`` are left out, so a partial mesh
    yields a partial mapping instead of an error.
    """
    count = len(mesh)
    annotations: Dict[str, np.ndarray] = {}
    for name, indices in MESH_ANNOTATIONS.items():
        if max(indices) >= count:
            continue
        annotations[name] = np.array(mesh[indices], dtype=np.float64)
    return annotations


def build_local_mesh(mesh: np.ndarray) -> np.ndarray:
    """Map a pixel-space mesh into a square face crop of ``LOCAL_MESH_SIZE``.

    The crop is centred on the mesh bounding box, its side the longer box edge
    grown by ``LOCAL_CROP_MARGIN``. z is scaled with x and y, so the result does
    not depend on where the face sits in the frame or how large it is.
    """
    mesh = np.asarray(mesh, dtype=np.float64)
    if mesh.ndim != 2 or mesh.shape[0] == 0 or mesh.shape[1] < 3:
        return mesh.copy()
    low = mesh[:, :2].min(axis=0)
    high = mesh[:, :2].max(axis=0)
    side = float((high - low).max()) * LOCAL_CROP_MARGIN
    if side <= 0:
        side = 1.0
    scale = LOCAL_MESH_SIZE / side

    local = mesh.copy()
    local[:, :2] = (mesh[:, :2] - (low + high) / 2.0) * scale + LOCAL_MESH_SIZE / 2.0
    local[:, 2] = mesh[:, 2] * scale
    return local
