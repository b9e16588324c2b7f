## generalized matrix transformation operations for 3D homogeneous
## coordinates, used by the affine transform constructs

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import cos, sin, sqrt, pi

## a matrix is represented as a list of four four-vectors, one per
## row.  Transform nodes carry one of these; the geometry kernel
## applies it to column vectors (Mx).

epsilon = 1e-10


def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n, bool)) and isinstance(n, (int, float))


def isvect4(x):
    return isinstance(x, (list, tuple)) and len(x) == 4 and all(isgoodnum(c) for c in x)


def dot4(a, b):
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2] + a[3]*b[3]


class Matrix:
    """4x4 transformation matrix class for transforming homogemenous 3D coordinates"""

    def __init__(self, a=False):
        self.m = [[1, 0, 0, 0],
                  [0, 1, 0, 0],
                  [0, 0, 1, 0],
                  [0, 0, 0, 1]]

        if isinstance(a, Matrix):
            for i in range(4):
                self.setrow(i, a.getrow(i))
        elif isinstance(a, (tuple, list)) and len(a) == 4:
            for i in range(4):
                if not isvect4(a[i]):
                    raise ValueError('bad row in matrix initialization: {}'.format(a[i]))
                self.setrow(i, a[i])
        elif a is not False:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({},{},{},{})".format(self.m[0], self.m[1], self.m[2], self.m[3])

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.rows() == other.rows()

    def getrow(self, i):
        if i < 0 or i > 3:
            raise ValueError('bad row passed to getrow: {}'.format(i))
        return self.m[i]

    def getcol(self, j):
        if j < 0 or j > 3:
            raise ValueError('bad column passed to getcol: {}'.format(j))
        return [self.m[0][j],
                self.m[1][j],
                self.m[2][j],
                self.m[3][j]]

    def setrow(self, i, x):
        if not isvect4(x):
            raise ValueError('bad non-vector passed to setrow: {}'.format(x))
        if i < 0 or i > 3:
            raise ValueError('bad row index passed to setrow: {}'.format(i))
        self.m[i] = list(x)

    ## rows as plain lists of floats
    def rows(self):
        return [[float(x) for x in self.getrow(i)] for i in range(4)]

    def isidentity(self):
        return self.rows() == Matrix().rows()

    # matrix multiply.  If x is a matrix, compute MX.  If X is a
    # 4-vector, compute Mx.

    def mul(self, x):
        if isinstance(x, Matrix):
            return Matrix([[dot4(self.getrow(i), x.getcol(j)) for j in range(4)]
                           for i in range(4)])
        elif isvect4(x):
            return [dot4(self.getrow(i), x) for i in range(4)]

        raise ValueError('bad thing passed to mul(): {}'.format(x))


# return the generalized 4x4 arbitrary axis rotation matrix, angle in degrees
def Rotation(axis, angle):
    m = sqrt(axis[0]*axis[0] + axis[1]*axis[1] + axis[2]*axis[2])
    if m < epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    u = [axis[0]/m, axis[1]/m, axis[2]/m]

    rad = (angle % 360.0)*2.0*pi/360.0

    ux = u[0]
    uy = u[1]
    uz = u[2]

    cang = cos(rad)
    cmin = 1.0-cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin-uz*sang, ux*uz*cmin+uy*sang, 0],
         [uy*ux*cmin+uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang, 0],
         [uz*ux*cmin-uy*sang, uz*uy*cmin+ux*sang, cang+uz*uz*cmin, 0],
         [0, 0, 0, 1]]

    return Matrix(R)


## rotate about x, then y, then z (angles in degrees)
def EulerRotation(ax, ay, az):
    Rx = Rotation([1, 0, 0], ax)
    Ry = Rotation([0, 1, 0], ay)
    Rz = Rotation([0, 0, 1], az)
    return Rz.mul(Ry.mul(Rx))


def Translation(delta):
    dx = delta[0]
    dy = delta[1]
    dz = delta[2]
    T = [[1, 0, 0, dx],
         [0, 1, 0, dy],
         [0, 0, 1, dz],
         [0, 0, 0, 1]]
    return Matrix(T)


## uniform scale from a number, per-axis scale from a 3-vector
def Scale(x):
    if isgoodnum(x):
        sx = sy = sz = x
    elif isinstance(x, (list, tuple)) and len(x) == 3:
        sx = x[0]
        sy = x[1]
        sz = x[2]
    else:
        raise ValueError('bad scaling values passed to Scale')

    S = [[sx, 0, 0, 0],
         [0, sy, 0, 0],
         [0, 0, sz, 0],
         [0, 0, 0, 1.0]]
    return Matrix(S)
